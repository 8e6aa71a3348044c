"""
Simulation Module

Classes:
    Simulation: Fixed-rate tick loop updating components and flushing the store
"""

from typing import Protocol

from loguru import logger

from evoprop.store import EntityStore

class Component(Protocol):
    """Anything updated once per tick."""

    def update(self, elapsed_ms: float) -> None: ...

class Simulation:
    """
    Drives a set of components at a fixed tick rate.

    Every tick updates the components in the order they were added, then
    flushes the store, so that entities removed during the tick stay readable
    by every component until the tick is over.

    Public Attributes:
        store:      The store holding all entities
        tick_rate:  The number of ticks per simulated second
        components: The components updated every tick
        ticks:      The number of ticks run so far
        elapsed_ms: The total simulated time

    Public Methods:
        add(component):    Register a component (returned for convenience)
        tick(elapsed_ms):  Run one tick
        run(ticks):        Run several ticks of 1000 / tick_rate milliseconds
    """

    def __init__(self, store: EntityStore, tick_rate: int = 60):
        if tick_rate <= 0:
            raise ValueError(f"The tick rate must be positive, got {tick_rate}")

        self.store     : EntityStore     = store
        self.tick_rate : int             = tick_rate
        self.components: list[Component] = []
        self.ticks     : int             = 0
        self.elapsed_ms: float           = 0.0

    def add(self, component: Component) -> Component:
        self.components.append(component)
        return component

    def tick(self, elapsed_ms: float | None = None) -> None:
        """
        Run one tick.

        Parameters:
            elapsed_ms: simulated time since the previous tick (default: 1000 / tick_rate)
        """
        if elapsed_ms is None:
            elapsed_ms = 1000.0 / self.tick_rate

        for component in self.components:
            component.update(elapsed_ms)
        self.store.flush()

        self.ticks      += 1
        self.elapsed_ms += elapsed_ms

    def run(self, ticks: int) -> None:
        for _ in range(ticks):
            self.tick()
        logger.debug("[Simulation] Ran {} ticks, {} in total ({:.1f}s simulated)",
                     ticks, self.ticks, self.elapsed_ms / 1000.0)
