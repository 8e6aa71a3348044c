"""
Fitness Tracking Module

The fitness of an agent is the distance it has travelled along a path of
checkpoints. Every tick each agent is projected onto the closest segment of
the path; agents that stop making progress are crashed, and agents reaching
the last segment are finished.

Classes:
    Checkpoint:     A point of the path, ordered by index
    FitnessTracker: Updates the FitnessRecord of the tracked agents
"""

from math   import hypot
from typing import Iterable, Sequence

from loguru import logger

from evoprop.evolution.agent import Agent
from evoprop.run.config      import Config
from evoprop.store           import Entity, EntityStore, INVALID_ID

class Checkpoint(Entity):
    """
    A point on the path agents are rewarded for following.

    Public Attributes:
        index: Position of the checkpoint along the path
        x, y:  Coordinates of the checkpoint
    """

    def __init__(self, index: int = 0, x: float = 0.0, y: float = 0.0):
        super().__init__()
        self.index: int   = index
        self.x    : float = x
        self.y    : float = y

def closest_point_on_segment(px: float, py: float,
                             ax: float, ay: float,
                             bx: float, by: float) -> tuple[float, float]:
    """The point of segment AB closest to point P."""
    dx, dy = bx - ax, by - ay
    length_squared = dx * dx + dy * dy
    if length_squared == 0.0:
        return ax, ay
    t = ((px - ax) * dx + (py - ay) * dy) / length_squared
    t = min(max(t, 0.0), 1.0)
    return ax + t * dx, ay + t * dy

class FitnessTracker(Entity):
    """
    Tracks the fitness of agents along a path of checkpoints.

    The tracked agents are the ones listed in 'agent_ids' plus the current
    generation of the AgentPool referenced by 'pool_id'. Agents that are
    already crashed or finished keep their last fitness and are skipped.

    Public Attributes:
        agent_ids:                   IDs of individually tracked agents
        pool_id:                     ID of the AgentPool whose current generation is tracked
        start_index:                 Lowest checkpoint index belonging to the path
        end_index:                   Highest checkpoint index belonging to the path
        highest_fitness:             Best fitness of the tracked agents in the last update
        highest_performing_agent_id: ID of the agent with the best fitness (INVALID_ID if none)

    Public Properties:
        path: The path points, with their distance from the start of the path

    Public Methods:
        build_path():             Build the path from the Checkpoints in the store
        set_path(points):         Use the given points as path
        evaluate(agent):          Update the fitness of one agent
        update(elapsed_ms):       Update the fitness of all tracked agents
    """

    def __init__(self,
                 store      : EntityStore,
                 config     : Config | None = None,
                 agent_ids  : Iterable[int] = (),
                 pool_id    : int           = INVALID_ID,
                 start_index: int           = 0,
                 end_index  : int           = 1000):
        super().__init__()
        config = config if config is not None else Config()

        self._store = store
        self._max_stagnant_ticks = config.max_seconds_without_progress * config.tick_rate
        self._progress_delta     = config.progress_delta
        self._min_fitness        = config.min_fitness
        self._finish_distance    = config.finish_distance

        self.agent_ids  : list[int] = list(agent_ids)
        self.pool_id    : int       = pool_id
        self.start_index: int       = start_index
        self.end_index  : int       = end_index

        self.highest_fitness            : float = 0.0
        self.highest_performing_agent_id: int   = INVALID_ID

        self._points   : list[tuple[float, float]] = []
        self._distances: list[float]               = []

    @property
    def path(self) -> list[tuple[float, float, float]]:
        """The (x, y, distance from start) of every path point."""
        return [(x, y, d) for (x, y), d in zip(self._points, self._distances)]

    def build_path(self) -> None:
        """Create the path from the Checkpoints with an index in [start_index, end_index]."""
        checkpoints = sorted((cp for cp in self._store.of_type(Checkpoint)
                              if self.start_index <= cp.index <= self.end_index),
                             key=lambda cp: cp.index)
        self.set_path([(cp.x, cp.y) for cp in checkpoints])

    def set_path(self, points: Sequence[tuple[float, float]]) -> None:
        """Use the given points as path and precompute their distance from the start."""
        self._points    = [(float(x), float(y)) for x, y in points]
        self._distances = [0.0] * len(self._points)
        for i in range(1, len(self._points)):
            (x0, y0), (x1, y1) = self._points[i - 1], self._points[i]
            self._distances[i] = self._distances[i - 1] + hypot(x1 - x0, y1 - y0)

        logger.debug("[FitnessTracker][{}] Path of {} points, length {:.1f}",
                     self.id, len(self._points), self._distances[-1] if self._distances else 0.0)

    def _tracked_agent_ids(self) -> list[int]:
        # Import here to avoid circular import
        from evoprop.evolution.population import AgentPool

        ids  = list(self.agent_ids)
        pool = self._store.get_of_type(self.pool_id, AgentPool)
        if pool is not None:
            ids.extend(pool.current_generation_ids)
        return ids

    def update(self, elapsed_ms: float = 0.0) -> None:
        if len(self._points) < 2:
            return  # no path to calculate the fitness from

        self.highest_fitness             = 0.0
        self.highest_performing_agent_id = INVALID_ID

        for agent_id in self._tracked_agent_ids():
            agent = self._store.get_of_type(agent_id, Agent)
            if agent is None:
                continue
            if not agent.record.is_terminal:
                self.evaluate(agent)

            # Crashed and finished agents compete with their last fitness
            if agent.fitness > self.highest_fitness:
                self.highest_fitness             = agent.fitness
                self.highest_performing_agent_id = agent.id

    def evaluate(self, agent: Agent) -> None:
        """Update the FitnessRecord of an agent from its current position."""
        if len(self._points) < 2:
            return
        record = agent.record

        # Find the path segment closest to the agent
        min_index, min_distance = 0, float('inf')
        for i in range(1, len(self._points)):
            (ax, ay), (bx, by) = self._points[i - 1], self._points[i]
            cx, cy   = closest_point_on_segment(agent.x, agent.y, ax, ay, bx, by)
            distance = hypot(agent.x - cx, agent.y - cy)
            if distance < min_distance:
                min_index, min_distance = i - 1, distance

        # The fitness is the distance travelled along the path
        (ax, ay), (bx, by) = self._points[min_index], self._points[min_index + 1]
        cx, cy = closest_point_on_segment(agent.x, agent.y, ax, ay, bx, by)
        record.fitness = max(self._min_fitness, self._distances[min_index] + hypot(cx - ax, cy - ay))

        # Reaching the last segment of the path finishes the agent
        if min_index + 1 == len(self._points) - 1 and min_distance < self._finish_distance:
            record.finished = True
            logger.debug("[FitnessTracker][{}] Agent {} finished with fitness {:.1f}",
                         self.id, agent.id, record.fitness)

        # Count ticks without progress
        record.stagnant_ticks += 1
        if record.fitness - record.last_fitness > self._progress_delta:
            record.last_fitness   = record.fitness
            record.stagnant_ticks = 0

        # Crash agents that are not making progress
        if record.stagnant_ticks > self._max_stagnant_ticks:
            agent.crash()
            logger.debug("[FitnessTracker][{}] Agent {} crashed after {} ticks without progress",
                         self.id, agent.id, record.stagnant_ticks)
