"""
Stone Generation (Particle -> Triangle Mesh)
============================================
Turns every active particle into a small closed solid ("stone") for rendering.

Why is this file needed?
------------------------
1. Tessellation: Each particle kind maps, through STONE_PRESETS, to a base
   Platonic solid, a subdivision level and a size.
2. Lighting: Stones are flat shaded. Every triangle owns its three vertices and
   its normal is the face normal, oriented away from the stone center.
3. Decoupling: The output is plain numpy arrays; the render layer decides how to
   upload them (see view.widgets.vtk_utils).
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from anomalysim.config import FAMILY_GROWTH
from anomalysim.model.particles import ParticleKind
from anomalysim.model.vectors import VectorLike, normalize

if TYPE_CHECKING:
    import numpy.typing as npt
    from anomalysim.model.particles import Simulation

logger = logging.getLogger(__name__)

_Z_AXIS = np.array([0.0, 0.0, 1.0])


@dataclass
class Stone:
    """One renderable mesh. Arrays are owned by the stone, not shared with the simulation."""
    positions: npt.NDArray[np.float32]  # (V, 3)
    normals: npt.NDArray[np.float32]    # (V, 3)
    indices: npt.NDArray[np.uint32]     # (3T,)
    kind: Optional[ParticleKind] = None

    @property
    def n_vertices(self) -> int:
        return self.positions.shape[0]

    @property
    def n_triangles(self) -> int:
        return self.indices.size // 3

    @property
    def triangles(self) -> npt.NDArray[np.uint32]:
        """Indices reshaped to (T, 3)."""
        return self.indices.reshape(-1, 3)


@dataclass(frozen=True)
class StonePreset:
    solid: str          # "icosahedron" | "octahedron"
    subdivisions: int
    radius: float
    elongation: float = 1.0  # stretch along the particle heading


STONE_PRESETS: Dict[ParticleKind, StonePreset] = {
    ParticleKind.ELEMENTARY: StonePreset(solid="icosahedron", subdivisions=1, radius=0.35),
    ParticleKind.COMPOSITE: StonePreset(solid="octahedron", subdivisions=1, radius=0.6, elongation=1.4),
}


# ------------------------------------------------------------------------------
# Template solids (unit sphere)
# ------------------------------------------------------------------------------

def _icosahedron() -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    t = (1.0 + np.sqrt(5.0)) / 2.0
    vertices = np.array([
        [-1, t, 0], [1, t, 0], [-1, -t, 0], [1, -t, 0],
        [0, -1, t], [0, 1, t], [0, -1, -t], [0, 1, -t],
        [t, 0, -1], [t, 0, 1], [-t, 0, -1], [-t, 0, 1],
    ], dtype=np.float64)
    faces = np.array([
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
    ], dtype=np.int64)
    return vertices / np.linalg.norm(vertices, axis=1)[:, None], faces


def _octahedron() -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    vertices = np.array([
        [1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1],
    ], dtype=np.float64)
    faces = np.array([
        [0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
        [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5],
    ], dtype=np.int64)
    return vertices, faces


_SOLIDS = {"icosahedron": _icosahedron, "octahedron": _octahedron}


def _subdivide(
    vertices: npt.NDArray[np.float64],
    faces: npt.NDArray[np.int64],
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """Split every triangle into four, pushing new midpoints onto the unit sphere."""
    verts = [v for v in vertices]
    midpoint_cache: Dict[Tuple[int, int], int] = {}

    def midpoint(a: int, b: int) -> int:
        key = (a, b) if a < b else (b, a)
        if key not in midpoint_cache:
            m = (verts[a] + verts[b]) / 2.0
            verts.append(m / np.linalg.norm(m))
            midpoint_cache[key] = len(verts) - 1
        return midpoint_cache[key]

    new_faces = []
    for a, b, c in faces:
        ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
        new_faces.extend([[a, ab, ca], [b, bc, ab], [c, ca, bc], [ab, bc, ca]])

    return np.array(verts), np.array(new_faces, dtype=np.int64)


@lru_cache(maxsize=None)
def _template(solid: str, subdivisions: int) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """Unit-sphere template for a preset. Returned arrays are read-only."""
    try:
        vertices, faces = _SOLIDS[solid]()
    except KeyError:
        raise ValueError(f"Unknown solid {solid!r}; expected one of {sorted(_SOLIDS)}.") from None
    for _ in range(subdivisions):
        vertices, faces = _subdivide(vertices, faces)
    vertices.setflags(write=False)
    faces.setflags(write=False)
    return vertices, faces


# ------------------------------------------------------------------------------
# Placement
# ------------------------------------------------------------------------------

def _heading_rotation(direction: VectorLike) -> Rotation:
    """Rotation taking the local +z axis onto ``direction`` (identity for a zero heading)."""
    d = normalize(np.asarray(direction, dtype=np.float64))
    if not d.any():
        return Rotation.identity()

    axis = np.cross(_Z_AXIS, d)
    sin_a = np.linalg.norm(axis)
    cos_a = float(np.dot(_Z_AXIS, d))
    if sin_a < 1e-12:
        # Parallel or anti-parallel to +z
        return Rotation.identity() if cos_a > 0.0 else Rotation.from_rotvec([np.pi, 0.0, 0.0])
    return Rotation.from_rotvec(axis / sin_a * np.arctan2(sin_a, cos_a))


def _face_normals(corners: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Unit normals for a (T, 3, 3) array of triangle corners."""
    n = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    length = np.linalg.norm(n, axis=1)
    length[length == 0.0] = 1.0
    return n / length[:, None]


def preset_for(kind: ParticleKind) -> StonePreset:
    try:
        return STONE_PRESETS[kind]
    except KeyError:
        raise ValueError(f"No stone preset for particle kind {kind!r}.") from None


def generate_stone(
    kind: ParticleKind,
    position: VectorLike,
    direction: VectorLike = (0.0, 0.0, 0.0),
    family: int = 0,
) -> Stone:
    """
    Build the stone for one particle.

    Args:
        kind: Selects the tessellation preset.
        position: Center of the stone in world space.
        direction: Heading; the stone's local +z (elongation axis) follows it.
        family: Composite generation index; larger families get bigger stones.

    Returns:
        A flat-shaded Stone with outward-facing normals.
    """
    preset = preset_for(kind)
    vertices, faces = _template(preset.solid, preset.subdivisions)

    radius = preset.radius
    if kind is ParticleKind.COMPOSITE:
        radius *= 1.0 + FAMILY_GROWTH * max(int(family), 0)

    local = vertices * radius
    local = local * np.array([1.0, 1.0, preset.elongation])
    local = _heading_rotation(direction).apply(local)

    corners = local[faces]  # (T, 3, 3), still centered on the origin
    normals = _face_normals(corners)

    # Convex and centered on the origin: the centroid points outward
    inward = np.einsum("ij,ij->i", normals, corners.mean(axis=1)) < 0.0
    if inward.any():
        corners[inward] = corners[inward][:, ::-1]
        normals[inward] = -normals[inward]

    center = np.asarray(position, dtype=np.float64)
    positions = (corners.reshape(-1, 3) + center).astype(np.float32)
    vertex_normals = np.repeat(normals, 3, axis=0).astype(np.float32)
    indices = np.arange(positions.shape[0], dtype=np.uint32)

    return Stone(positions=positions, normals=vertex_normals, indices=indices, kind=kind)


def generate_view(simulation: Simulation) -> List[Stone]:
    """
    One fresh stone per active particle, in index order.

    Reads the simulation only; an empty simulation yields an empty list.
    """
    stones: List[Stone] = []
    for i in simulation.active_indices():
        stones.append(
            generate_stone(
                kind=ParticleKind.from_code(simulation.kinds[i]),
                position=simulation.positions[i],
                direction=simulation.directions[i],
                family=int(simulation.families[i]),
            )
        )
    return stones
