"""
VTK Conversion Utilities
Helper functions turning generated stones into PyVista data sets.
"""
from typing import List, Sequence

import numpy as np
import numpy.typing as npt
import pyvista as pv

import logging

from anomalysim.controller.stones import Stone
from anomalysim.model.particles import ParticleKind

logger = logging.getLogger(__name__)

KIND_SCALARS = "kind"
KIND_COLORS: List[str] = ["#FFD23F", "#EE4266"]  # indexed by ParticleKind.code


class VtkUtils:
    @staticmethod
    def triangles_to_faces(triangles: npt.NDArray[np.integer]) -> npt.NDArray[np.int64]:
        """
        Convert a (T, 3) triangle index array to the flat VTK cell layout.

        Returns:
            Array [3, a0, b0, c0, 3, a1, b1, c1, ...] of length 4T.
        """
        tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        return np.hstack([np.full((tri.shape[0], 1), 3, dtype=np.int64), tri]).ravel()

    @staticmethod
    def stone_to_polydata(stone: Stone) -> pv.PolyData:
        """Wrap a single stone as PolyData with point normals attached."""
        if stone.n_vertices == 0:
            return pv.PolyData()
        pd = pv.PolyData(
            np.asarray(stone.positions, dtype=np.float32),
            VtkUtils.triangles_to_faces(stone.triangles),
        )
        pd.point_data.active_normals = np.asarray(stone.normals, dtype=np.float32)
        return pd

    @staticmethod
    def merge_stones(stones: Sequence[Stone]) -> pv.PolyData:
        """
        Pack all stones into one PolyData so a frame needs a single actor.

        Triangle indices are offset per stone; a per-cell "kind" array records
        which particle kind each triangle belongs to (for coloring).
        """
        stones = [s for s in stones if s.n_vertices > 0]
        if not stones:
            return pv.PolyData()

        points_list: list[npt.NDArray[np.float32]] = []
        normals_list: list[npt.NDArray[np.float32]] = []
        tri_list: list[npt.NDArray[np.int64]] = []
        kind_list: list[npt.NDArray[np.int8]] = []
        offset = 0

        for stone in stones:
            points_list.append(stone.positions)
            normals_list.append(stone.normals)
            tri_list.append(stone.triangles.astype(np.int64) + offset)
            code = stone.kind.code if isinstance(stone.kind, ParticleKind) else 0
            kind_list.append(np.full(stone.n_triangles, code, dtype=np.int8))
            offset += stone.n_vertices

        pd = pv.PolyData(
            np.vstack(points_list).astype(np.float32),
            VtkUtils.triangles_to_faces(np.vstack(tri_list)),
        )
        pd.point_data.active_normals = np.vstack(normals_list).astype(np.float32)
        pd.cell_data[KIND_SCALARS] = np.concatenate(kind_list)
        return pd
