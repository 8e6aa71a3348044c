"""Pytest configuration and shared fixtures."""

import pytest
import random
import sys
import numpy as np
from pathlib import Path

# Add the source directory to the Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir / "src"))


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility."""
    np.random.seed(42)
    random.seed(42)
    yield
    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def store():
    """Provide an empty entity store."""
    from evoprop.store import EntityStore
    return EntityStore()


@pytest.fixture
def config():
    """Provide a default configuration."""
    from evoprop.run.config import Config
    return Config()
