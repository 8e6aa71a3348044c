"""
Unit tests for the Simulation tick loop and logger setup.
"""

import pytest
from loguru import logger

from evoprop.run   import Simulation, setup_logger
from evoprop.store import Entity


# ============================================================================
# Helpers
# ============================================================================

class Recorder:
    """A component recording the elapsed times it was updated with."""

    def __init__(self, name, calls):
        self.name  = name
        self.calls = calls

    def update(self, elapsed_ms):
        self.calls.append((self.name, elapsed_ms))


class Remover:
    """A component removing an entity during its update."""

    def __init__(self, store, entity_id):
        self.store     = store
        self.entity_id = entity_id

    def update(self, elapsed_ms):
        self.store.remove(self.entity_id)


class Reader:
    """A component checking whether an entity is still readable."""

    def __init__(self, store, entity_id):
        self.store     = store
        self.entity_id = entity_id
        self.seen      = []

    def update(self, elapsed_ms):
        self.seen.append(self.store.get(self.entity_id) is not None)


# ============================================================================
# Test Simulation
# ============================================================================

class TestSimulation:
    """Test Simulation."""

    def test_invalid_tick_rate(self, store):
        with pytest.raises(ValueError, match="tick rate"):
            Simulation(store, tick_rate=0)

    def test_components_updated_in_order(self, store):
        """Test that every tick updates all components in insertion order."""
        calls = []
        simulation = Simulation(store, tick_rate=50)
        simulation.add(Recorder("a", calls))
        simulation.add(Recorder("b", calls))

        simulation.tick()
        simulation.tick(5.0)

        assert calls == [("a", 20.0), ("b", 20.0), ("a", 5.0), ("b", 5.0)]
        assert simulation.ticks == 2
        assert simulation.elapsed_ms == pytest.approx(25.0)

    def test_add_returns_component(self, store):
        recorder = Recorder("a", [])
        assert Simulation(store).add(recorder) is recorder

    def test_run(self, store):
        """Test running a number of fixed ticks."""
        calls = []
        simulation = Simulation(store, tick_rate=10)
        simulation.add(Recorder("a", calls))

        simulation.run(25)

        assert len(calls) == 25
        assert simulation.ticks == 25
        assert simulation.elapsed_ms == pytest.approx(2500.0)

    def test_removal_deferred_to_end_of_tick(self, store):
        """Test that removed entities stay readable by later components of the same tick."""
        entity = Entity()
        store.insert(entity)
        simulation = Simulation(store)
        simulation.add(Remover(store, entity.id))
        reader = simulation.add(Reader(store, entity.id))

        simulation.tick()
        assert reader.seen == [True]
        assert entity.id not in store

        simulation.tick()
        assert reader.seen == [True, False]


# ============================================================================
# Test Logger Setup
# ============================================================================

class TestSetupLogger:
    """Test setup_logger."""

    def test_log_file(self, tmp_path):
        """Test that messages at or above the level reach the log file."""
        log_file = tmp_path / "run.log"
        setup_logger(level="INFO", log_file=str(log_file), enable_colors=False)

        logger.debug("hidden message")
        logger.info("visible message")
        logger.remove()

        content = log_file.read_text(encoding="utf-8")
        assert "visible message" in content
        assert "hidden message" not in content
