"""
Roulette Wheel Module

Fitness-proportionate selection of two parents. The agents of the current
generation are laid out as arcs of a wheel, each sweeping an angle
proportional to its share of the total fitness. A spun wheel slows down by
friction; once it stops, the arcs under two fixed reference points
(half a turn apart) identify the father and the mother.

Classes:
    RouletteWheel: The spinning wheel entity

Functions:
    weighted_sample: Headless equivalent of the wheel, as independent weighted draws
"""

import random
from math   import pi
from typing import Sequence

import numpy as np
from loguru import logger

from evoprop.evolution.agent import Agent
from evoprop.run.config      import Config
from evoprop.store           import Entity, EntityStore, EventListener, INVALID_ID

TWO_PI = 2.0 * pi

def weighted_sample(ids: Sequence[int], fitnesses: Sequence[float], k: int = 2) -> list[int]:
    """
    Draw 'k' IDs independently, each with probability fitness / total fitness.

    IDs with zero (or negative) fitness are never drawn. Returns an empty
    list when no ID has a positive fitness.
    """
    weights = np.array([max(float(f), 0.0) for f in fitnesses])
    total   = weights.sum()
    if len(ids) == 0 or total <= 0.0:
        return []
    indices = np.random.choice(len(ids), size=k, replace=True, p=weights / total)
    return [ids[i] for i in indices]

class RouletteWheel(Entity, EventListener):
    """
    A wheel of fortune selecting parents proportionally to their fitness.

    Public Attributes:
        pool_id:           ID of the AgentPool whose current generation populates the wheel
        angle:             Current rotation of the wheel, in radians
        angular_velocity:  Current angular velocity
        wheel_friction:    Fraction of the velocity lost every update
        spin_acceleration: Maximum velocity added by a single spin
        min_velocity:      Velocities below this value stop the wheel
        father_id:         The agent selected at the first reference point (INVALID_ID if none)
        mother_id:         The agent selected at the second reference point (INVALID_ID if none)

    Public Properties:
        is_spinning: Whether the wheel is still moving

    Public Methods:
        update(elapsed_ms):  Advance the wheel by one tick and refresh the selection
        spin():              Add a random impulse to the velocity
        spin_instant_stop(): Move to a random angle and stop immediately
        arcs():              The (agent ID, start angle, sweep angle) of each arc
        select():            Compute the (father ID, mother ID) at the current angle

    Events:
        SPIN:              spin()
        SPIN_INSTANT_STOP: spin_instant_stop()
    """

    def __init__(self, store: EntityStore, config: Config | None = None, pool_id: int = INVALID_ID):
        super().__init__()
        config = config if config is not None else Config()

        self._store = store
        self.pool_id          : int   = pool_id
        self.angle            : float = 1.0
        self.angular_velocity : float = 0.0
        self.wheel_friction   : float = config.wheel_friction
        self.spin_acceleration: float = config.spin_acceleration
        self.min_velocity     : float = config.min_velocity
        self.father_id        : int   = INVALID_ID
        self.mother_id        : int   = INVALID_ID

    @property
    def is_spinning(self) -> bool:
        return self.angular_velocity > 0.0

    def update(self, elapsed_ms: float = 0.0) -> None:
        """Rotate the wheel, slow it down by friction and refresh the selected agents."""
        self.angle            += self.angular_velocity / 360
        self.angular_velocity *= 1.0 - self.wheel_friction
        if self.angular_velocity < self.min_velocity:
            self.angular_velocity = 0.0
        self.select()

    def spin(self) -> None:
        self.angular_velocity += self.spin_acceleration * (0.5 + 0.5 * random.random())

    def spin_instant_stop(self) -> None:
        self.angle            = random.uniform(0.0, TWO_PI)
        self.angular_velocity = 0.0
        self.select()

    def _candidates(self) -> list[Agent]:
        # Import here to avoid circular import
        from evoprop.evolution.population import AgentPool

        pool = self._store.get_of_type(self.pool_id, AgentPool)
        if pool is None:
            return []
        agents = (self._store.get_of_type(agent_id, Agent) for agent_id in pool.current_generation_ids)
        return [agent for agent in agents if agent is not None]

    def arcs(self) -> list[tuple[int, float, float]]:
        """
        The arcs of the wheel at its current angle.

        Returns:
            (agent ID, start angle in [0, 2pi), sweep angle) of every agent with positive fitness
        """
        agents      = self._candidates()
        fitness_sum = sum(agent.fitness for agent in agents)
        if fitness_sum <= 0.0:
            return []

        arcs = []
        current_angle = 0.0
        for agent in agents:
            if agent.fitness <= 0.0:
                continue    # agents without fitness never get selected
            sweep = agent.fitness / fitness_sum * TWO_PI
            start = ((self.angle % TWO_PI) + current_angle) % TWO_PI
            arcs.append((agent.id, start, sweep))
            current_angle += sweep
        return arcs

    def select(self) -> tuple[int, int]:
        """
        Find the agents under the two reference points, at 2pi (father) and pi (mother).

        Returns:
            (father ID, mother ID); INVALID_ID marks a parent that could not be resolved
        """
        father_id, mother_id = INVALID_ID, INVALID_ID
        for agent_id, start, sweep in self.arcs():
            # An arc may wrap past 2pi, and a single arc may cover both points
            if father_id == INVALID_ID and (TWO_PI - start) % TWO_PI < sweep:
                father_id = agent_id
            if mother_id == INVALID_ID and (pi - start) % TWO_PI < sweep:
                mother_id = agent_id

        if (father_id, mother_id) != (self.father_id, self.mother_id):
            logger.debug("[RouletteWheel][{}] Selected father={} mother={}", self.id, father_id, mother_id)
        self.father_id, self.mother_id = father_id, mother_id
        return father_id, mother_id

    def handle_event(self, message: str) -> None:
        if message == "SPIN":
            self.spin()
        elif message == "SPIN_INSTANT_STOP":
            self.spin_instant_stop()
