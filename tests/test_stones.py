"""Tests for particle -> mesh generation."""

import numpy as np
import pytest

from anomalysim.controller.stones import (
    STONE_PRESETS, Stone, generate_stone, generate_view, preset_for
)
from anomalysim.model.particles import ParticleKind, Simulation


def _triangle_corners(stone: Stone) -> np.ndarray:
    return stone.positions.astype(np.float64)[stone.triangles.astype(np.int64)]


class TestGenerateStone:
    @pytest.mark.parametrize("kind, n_triangles", [
        (ParticleKind.ELEMENTARY, 80),
        (ParticleKind.COMPOSITE, 32),
    ])
    def test_flat_shaded_layout(self, kind, n_triangles):
        stone = generate_stone(kind, (1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
        assert stone.kind is kind
        assert stone.n_triangles == n_triangles
        assert stone.n_vertices == 3 * n_triangles
        assert stone.indices.dtype == np.uint32
        assert stone.positions.dtype == np.float32
        assert stone.normals.shape == stone.positions.shape
        assert stone.indices.max() < stone.n_vertices

    @pytest.mark.parametrize("kind", list(ParticleKind))
    def test_normals_are_unit_and_outward(self, kind):
        center = np.array([4.0, -2.0, 7.0])
        stone = generate_stone(kind, center, (1.0, 1.0, 0.0), family=1)
        np.testing.assert_allclose(np.linalg.norm(stone.normals, axis=1), 1.0, atol=1e-5)

        corners = _triangle_corners(stone)
        face_normals = stone.normals.astype(np.float64)[stone.triangles[:, 0].astype(np.int64)]
        centroids = corners.mean(axis=1) - center
        assert np.all(np.einsum("ij,ij->i", face_normals, centroids) > 0.0)

    @pytest.mark.parametrize("kind", list(ParticleKind))
    def test_winding_matches_normal(self, kind):
        stone = generate_stone(kind, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        corners = _triangle_corners(stone)
        geometric = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
        face_normals = stone.normals[stone.triangles[:, 0].astype(np.int64)]
        assert np.all(np.einsum("ij,ij->i", geometric, face_normals) > 0.0)

    def test_centered_on_position(self):
        stone = generate_stone(ParticleKind.COMPOSITE, (1.0, 2.0, 3.0), (0.3, -0.2, 0.9))
        np.testing.assert_allclose(stone.positions.mean(axis=0), [1.0, 2.0, 3.0], atol=1e-4)

    def test_composite_stretched_along_heading(self):
        stone = generate_stone(ParticleKind.COMPOSITE, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        extent = np.abs(stone.positions).max(axis=0)
        preset = STONE_PRESETS[ParticleKind.COMPOSITE]
        assert extent[0] == pytest.approx(preset.radius * preset.elongation, rel=1e-5)
        assert extent[1] == pytest.approx(preset.radius, rel=1e-5)

    def test_zero_heading_is_allowed(self):
        stone = generate_stone(ParticleKind.ELEMENTARY, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        assert np.all(np.isfinite(stone.positions))

    def test_antiparallel_heading(self):
        up = generate_stone(ParticleKind.COMPOSITE, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        down = generate_stone(ParticleKind.COMPOSITE, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        np.testing.assert_allclose(
            np.abs(up.positions).max(axis=0), np.abs(down.positions).max(axis=0), atol=1e-6
        )

    def test_family_grows_composites(self):
        small = generate_stone(ParticleKind.COMPOSITE, (0, 0, 0), (0, 0, 1), family=0)
        large = generate_stone(ParticleKind.COMPOSITE, (0, 0, 0), (0, 0, 1), family=2)
        assert np.abs(large.positions).max() > np.abs(small.positions).max()

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            preset_for("photon")


class TestGenerateView:
    def test_empty(self):
        assert generate_view(Simulation()) == []

    def test_one_stone_per_active_particle_in_order(self, empty_simulation):
        sim = empty_simulation
        sim.create_composite((0, 0, 0), (1, 0, 0))
        sim.create_elementary((10, 0, 0), (0, 1, 0), active=False)
        sim.create_elementary((20, 0, 0), (0, 0, 1))
        stones = generate_view(sim)
        assert [s.kind for s in stones] == [ParticleKind.COMPOSITE, ParticleKind.ELEMENTARY]
        np.testing.assert_allclose(stones[1].positions.mean(axis=0), [20.0, 0.0, 0.0], atol=1e-4)

    def test_does_not_touch_simulation(self, mixed_simulation):
        before = mixed_simulation.positions.copy()
        stones = generate_view(mixed_simulation)
        stones[0].positions[:] = 0.0
        np.testing.assert_array_equal(mixed_simulation.positions, before)

    def test_fresh_arrays_every_call(self, electron_pair):
        a = generate_view(electron_pair)
        b = generate_view(electron_pair)
        assert a[0].positions is not b[0].positions
        np.testing.assert_array_equal(a[0].positions, b[0].positions)
