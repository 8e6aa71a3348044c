"""
Integration tests for the generation loop.

Pool, fitness tracker, roulette wheel and state machine run together in a
Simulation. Agents are never moved by an environment, so every generation
ends when its agents crash for lack of progress; the loop must keep breeding
new generations without leaking entities.
"""

import pytest

from evoprop.evolution import (Agent, AgentPool, FitnessTracker, GeneticAlgorithm,
                               RouletteWheel, StateMachine)
from evoprop.run       import Config, Simulation
from evoprop.store     import EventChannel


@pytest.fixture
def loop_config():
    config = Config()
    config.spawn_count                  = 4
    config.sensor_count                 = 3
    config.hidden_layer_size            = 2
    config.random_agent_count           = 1
    config.state_change_time_ms         = 0
    config.tick_rate                    = 10
    config.max_seconds_without_progress = 0.5
    return config


@pytest.fixture
def world(store, loop_config):
    """All evolution components wired in a Simulation."""
    simulation = Simulation(store, tick_rate=loop_config.tick_rate)

    pool = AgentPool(store, loop_config)
    store.insert(pool)
    tracker = FitnessTracker(store, loop_config, pool_id=pool.id)
    store.insert(tracker)
    tracker.set_path([(0.0, 0.0), (100.0, 0.0), (200.0, 0.0)])
    wheel = RouletteWheel(store, loop_config, pool_id=pool.id)
    store.insert(wheel)
    ga = GeneticAlgorithm(store, loop_config, wheel_id=wheel.id, pool_id=pool.id)
    store.insert(ga)
    machine = StateMachine(store, config=loop_config, pool_id=pool.id, wheel_id=wheel.id,
                           genetic_algorithm_id=ga.id)
    store.insert(machine)

    for component in (pool, tracker, wheel, machine):
        simulation.add(component)
    return simulation, pool, machine


# Per agent: the agent, 3 + 2 + 2 nodes and 3 * 2 + 2 * 2 connections
ENTITIES_PER_AGENT = 1 + 7 + 10


class TestEvolutionLoop:
    """Test the generation loop end to end."""

    def test_generations_advance(self, store, world):
        """Test that the loop keeps producing generations."""
        simulation, pool, machine = world
        EventChannel(store).send(machine.id, "START")

        simulation.run(200)

        assert pool.generation >= 4
        assert machine.state_name != "Idle"

    def test_entity_count_stays_bounded(self, store, world):
        """Test that destroyed generations release their entities."""
        simulation, pool, machine = world
        EventChannel(store).send(machine.id, "START")

        largest = 0
        for _ in range(300):
            simulation.tick()
            largest = max(largest, len(store))

        # 5 components plus at most a current and a next generation
        assert largest <= 5 + 2 * 4 * ENTITIES_PER_AGENT
        assert len(list(store.of_type(Agent))) <= 8

    def test_bred_generations_have_full_size(self, store, world):
        """Test that every promoted generation has spawn_count agents."""
        simulation, pool, machine = world
        EventChannel(store).send(machine.id, "START")

        sizes = {}
        for _ in range(200):
            simulation.tick()
            sizes[pool.generation] = len(pool.current_generation_ids)

        assert all(size == 4 for generation, size in sizes.items() if generation > 1)

    def test_stop_ends_loop(self, store, world):
        """Test that STOP parks the loop and discards the partial generation."""
        simulation, pool, machine = world
        channel = EventChannel(store)
        channel.send(machine.id, "START")
        simulation.run(50)

        channel.send(machine.id, "STOP")
        generation = pool.generation
        simulation.run(50)

        assert machine.state_name == "Idle"
        assert pool.generation == generation
        assert pool.next_generation_ids == []
