from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

from anomalysim.config import CONFINEMENT, COUPLING, SOFTENING

if TYPE_CHECKING:
    import numpy.typing as npt
    from anomalysim.model.particles import Simulation


# Interaction law, for the displacement r = p_i - p_j and d2 = |r|^2:
#   F_i = COUPLING * q_i * q_j * r / (d2 + SOFTENING^2)^(3/2)
#         - CONFINEMENT * r / |r|          (only when both are composite)
#   F_j = -F_i
# Like charges push apart; composites are additionally pulled together by a
# constant-magnitude term. Coincident particles contribute nothing.


@nb.jit(nopython=True, cache=True)
def _pair_force(
    xi: float, yi: float, zi: float,
    xj: float, yj: float, zj: float,
    qi: float, qj: float,
    confined: bool,
    coupling: float,
    confinement: float,
    softening: float,
) -> tuple[float, float, float]:
    """
    Force on particle i from particle j.

    Args:
        xi, yi, zi: Position of particle i.
        xj, yj, zj: Position of particle j.
        qi, qj: Charges.
        confined: True when both particles are composite.
        coupling, confinement, softening: Law coefficients.

    Returns:
        (fx, fy, fz) acting on i. The force on j is the exact negation.
    """
    dx = xi - xj
    dy = yi - yj
    dz = zi - zj
    d2 = dx * dx + dy * dy + dz * dz
    if d2 == 0.0:
        return 0.0, 0.0, 0.0

    s2 = d2 + softening * softening
    k = coupling * qi * qj / (s2 * np.sqrt(s2))
    if confined:
        k -= confinement / np.sqrt(d2)
    return k * dx, k * dy, k * dz


@nb.jit(nopython=True, cache=True)
def _accumulate(
    positions: npt.NDArray[np.float32],
    charges: npt.NDArray[np.float64],
    composite: npt.NDArray[np.bool_],
    active: npt.NDArray[np.bool_],
    forces: npt.NDArray[np.float64],
    coupling: float,
    confinement: float,
    softening: float,
) -> None:
    """
    Zero ``forces`` and sum every unordered active pair (i < j) into it.

    Each pair is evaluated once; i receives F and j receives -F.
    """
    n = positions.shape[0]
    for i in range(n):
        forces[i, 0] = 0.0
        forces[i, 1] = 0.0
        forces[i, 2] = 0.0

    for i in range(n):
        if not active[i]:
            continue
        xi = np.float64(positions[i, 0])
        yi = np.float64(positions[i, 1])
        zi = np.float64(positions[i, 2])
        for j in range(i + 1, n):
            if not active[j]:
                continue
            fx, fy, fz = _pair_force(
                xi, yi, zi,
                np.float64(positions[j, 0]), np.float64(positions[j, 1]), np.float64(positions[j, 2]),
                charges[i], charges[j],
                composite[i] and composite[j],
                coupling, confinement, softening,
            )
            forces[i, 0] += fx
            forces[i, 1] += fy
            forces[i, 2] += fz
            forces[j, 0] -= fx
            forces[j, 1] -= fy
            forces[j, 2] -= fz


def accumulate_forces(
    simulation: Simulation,
    coupling: float = COUPLING,
    confinement: float = CONFINEMENT,
    softening: float = SOFTENING,
) -> None:
    """
    Recompute ``simulation.forces`` from scratch for the current positions.

    Inactive particles neither exert nor receive force; their rows end up zero.
    """
    if len(simulation) == 0:
        return
    _accumulate(
        np.ascontiguousarray(simulation.positions, dtype=np.float32),
        simulation.charges(),
        np.ascontiguousarray(simulation.is_composite()),
        np.ascontiguousarray(simulation.active),
        simulation.forces,
        float(coupling),
        float(confinement),
        float(softening),
    )


def pair_force(
    simulation: Simulation,
    i: int,
    j: int,
    coupling: float = COUPLING,
    confinement: float = CONFINEMENT,
    softening: float = SOFTENING,
) -> npt.NDArray[np.float64]:
    """Force that particle j exerts on particle i, as a (3,) array."""
    p = simulation.positions
    q = simulation.charges()
    composite = simulation.is_composite()
    fx, fy, fz = _pair_force(
        float(p[i, 0]), float(p[i, 1]), float(p[i, 2]),
        float(p[j, 0]), float(p[j, 1]), float(p[j, 2]),
        float(q[i]), float(q[j]),
        bool(composite[i] and composite[j]),
        float(coupling), float(confinement), float(softening),
    )
    return np.array([fx, fy, fz], dtype=np.float64)
