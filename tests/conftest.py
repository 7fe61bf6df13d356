"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

import numpy as np

# Add the src directory to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from anomalysim.model.camera import Camera
from anomalysim.model.particles import Simulation


@pytest.fixture
def rng():
    """Deterministic random source."""
    return np.random.default_rng(1234)


@pytest.fixture
def empty_simulation():
    return Simulation()


@pytest.fixture
def electron_pair():
    """Two electrons at rest, one unit apart along x."""
    sim = Simulation()
    sim.create_elementary((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    sim.create_elementary((1.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    return sim


@pytest.fixture
def mixed_simulation(rng):
    """A handful of electrons and quarks with random positions and headings."""
    sim = Simulation()
    for k in range(6):
        position = rng.uniform(-5.0, 5.0, size=3)
        velocity = rng.uniform(-1.0, 1.0, size=3)
        if k % 2 == 0:
            sim.create_elementary(position, velocity)
        else:
            sim.create_composite(position, velocity, secondary=k % 3 == 0, family=k % 3, flavor=k % 2)
    return sim


@pytest.fixture
def level_camera():
    """Eye at the origin looking along +y with +z up; right is +x."""
    return Camera(eye=(0.0, 0.0, 0.0), target=(0.0, 1.0, 0.0), up=(0.0, 0.0, 1.0))
