"""
Evolution Example

Headless run of the generation loop: agents drive along a straight road of
checkpoints, a fitness tracker rewards the distance travelled, and the
state machine breeds each new generation with the roulette wheel and the
genetic algorithm.

The physics are deliberately minimal. Every tick each autonomous agent moves
along the road by its throttle (reversing is not allowed), and drifts
sideways by its steering. Its sensors report the lateral offset from the
road and the progress along it, so good drivers learn to keep a positive
throttle and little steering.

Classes:
    RoadPhysics:     Moves agents and fills their sensors
    Trial_Evolution: Wires all evolution components into a Simulation

Usage:
    config = Config("examples/configs/config_evolution.ini")
    trial  = Trial_Evolution(config)
    trial.run(generations=20)
"""

from loguru import logger

from evoprop.evolution import (Agent, AgentPool, Checkpoint, FitnessTracker,
                               GeneticAlgorithm, RouletteWheel, StateMachine)
from evoprop.run       import Config, Simulation
from evoprop.store     import EntityStore, EventChannel

ROAD_LENGTH = 1000.0
ROAD_WIDTH  = 40.0

class RoadPhysics:
    """
    Moves the agents of the current generation along a road on the x axis.

    Public Attributes:
        speed: Distance travelled per tick at full throttle
    """

    def __init__(self, store: EntityStore, pool: AgentPool, speed: float = 5.0):
        self.store = store
        self.pool  = pool
        self.speed = speed

    def update(self, elapsed_ms: float) -> None:
        for agent_id in self.pool.current_generation_ids:
            agent = self.store.get_of_type(agent_id, Agent)
            if agent is None or agent.record.is_terminal:
                continue

            agent.x += max(agent.throttle, 0.0) * self.speed
            agent.y += agent.steering * self.speed * 0.5
            if abs(agent.y) > ROAD_WIDTH:
                agent.crash()   # left the road

            offset = 0.5 + agent.y / (2 * ROAD_WIDTH)
            agent.set_sensor_values([offset, 1.0 - offset, agent.x / ROAD_LENGTH])

class Trial_Evolution:
    """
    Evolves agents driving along the road.

    Public Attributes:
        config:     The configuration of all components
        store:      The store holding all entities
        simulation: The tick loop
        pool:       The AgentPool
        tracker:    The FitnessTracker
        machine:    The StateMachine running the generation loop
    """

    def __init__(self, config: Config, checkpoints: int = 11):
        self.config = config
        self.store  = EntityStore()

        for index in range(checkpoints):
            self.store.insert(Checkpoint(index, index * ROAD_LENGTH / (checkpoints - 1), 0.0))

        self.pool = AgentPool(self.store, config)
        self.store.insert(self.pool)
        self.pool.start_checkpoint_id = next(cp.id for cp in self.store.of_type(Checkpoint) if cp.index == 0)

        self.tracker = FitnessTracker(self.store, config, pool_id=self.pool.id)
        self.store.insert(self.tracker)
        self.tracker.build_path()

        wheel = RouletteWheel(self.store, config, pool_id=self.pool.id)
        self.store.insert(wheel)

        ga = GeneticAlgorithm(self.store, config, wheel_id=wheel.id, pool_id=self.pool.id)
        self.store.insert(ga)

        self.machine = StateMachine(self.store, config=config, pool_id=self.pool.id,
                                    wheel_id=wheel.id, genetic_algorithm_id=ga.id)
        self.store.insert(self.machine)

        # Order matters: drive, move, score, select, advance the loop
        self.simulation = Simulation(self.store, tick_rate=config.tick_rate)
        for component in (self.pool, RoadPhysics(self.store, self.pool), self.tracker, wheel, self.machine):
            self.simulation.add(component)

    def _best_fitness(self) -> float:
        agents = [self.store.get_of_type(a, Agent) for a in self.pool.current_generation_ids]
        return max((agent.fitness for agent in agents if agent is not None), default=0.0)

    def run(self, generations: int = 20, max_ticks: int = 100_000) -> None:
        """Run the loop until the given number of generations has been simulated."""
        EventChannel(self.store).send(self.machine.id, "START")

        last_generation = self.pool.generation
        best_fitness    = 0.0
        while self.pool.generation <= generations and self.simulation.ticks < max_ticks:
            self.simulation.tick()
            best_fitness = max(best_fitness, self._best_fitness())
            if self.pool.generation != last_generation:
                logger.info("Generation {:3d}: best fitness {:7.1f}", last_generation, best_fitness)
                last_generation = self.pool.generation
                best_fitness    = 0.0

        EventChannel(self.store).send(self.machine.id, "STOP")
