"""Tests for the core boundary object."""

import numpy as np
import pytest

from anomalysim.controller.navigation import InputState
from anomalysim.controller.universe import Universe
from anomalysim.model.camera import MoveAxis, RotationAxis
from anomalysim.model.particles import ParticleKind


class TestUniverse:
    def test_empty_universe_renders_nothing(self):
        universe = Universe()
        assert universe.frame(InputState()) == []
        assert universe.frames == 1

    def test_invalid_dt(self):
        with pytest.raises(ValueError):
            Universe(dt=0.0)

    def test_seeded(self):
        universe = Universe.seeded(seed=3, pairs=2)
        assert len(universe.simulation) == 4
        stones = universe.frame(InputState())
        assert len(stones) == 4

    def test_seeded_default_pairs(self):
        assert len(Universe.seeded(seed=0).simulation) == 20

    def test_same_seed_same_history(self):
        a = Universe.seeded(seed=11, pairs=3)
        b = Universe.seeded(seed=11, pairs=3)
        for _ in range(5):
            a.frame(InputState())
            b.frame(InputState())
        np.testing.assert_array_equal(a.simulation.positions, b.simulation.positions)

    def test_spawn_and_step(self):
        universe = Universe(dt=0.5)
        i = universe.spawn(ParticleKind.COMPOSITE, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), family=1)
        universe.step()
        np.testing.assert_allclose(universe.simulation.particle(i).position, [0.5, 0.0, 0.0])
        universe.step(dt=0.25)
        np.testing.assert_allclose(universe.simulation.particle(i).position, [0.75, 0.0, 0.0])

    def test_frame_moves_camera_and_steps(self):
        universe = Universe(camera_step=0.1)
        universe.spawn(ParticleKind.ELEMENTARY, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        eye_before = universe.pose()[0]
        stones = universe.frame(InputState(up=True))
        assert not np.array_equal(universe.pose()[0], eye_before)
        assert universe.simulation.positions[0, 2] > 0.0
        assert stones[0].kind is ParticleKind.ELEMENTARY

    def test_camera_primitives(self):
        universe = Universe()
        eye, target, _ = universe.pose()
        universe.apply_move(MoveAxis.FORWARD, 0.1)
        universe.apply_rotation(RotationAxis.HORIZONTAL, 0.2)
        assert not np.array_equal(universe.pose()[0], eye)
        assert not np.array_equal(universe.pose()[1], target)

    def test_look(self):
        universe = Universe()
        before = universe.pose()[1]
        universe.look(10.0, 0.0)
        assert not np.array_equal(universe.pose()[1], before)

    def test_stats(self):
        universe = Universe.seeded(seed=5, pairs=1)
        stones = universe.frame(InputState())
        stats = universe.stats(stones)
        assert stats.frame == 1
        assert stats.active == 2
        assert stats.stones == 2
        assert stats.kinetic_energy > 0.0
        assert stats.net_force == pytest.approx(0.0, abs=1e-9)
