"""
Simulation Stepping & Seeding
=============================
Advances the particle arena by one fixed time quantum and provides the default
seeding policy used at startup.

Why is this file needed?
------------------------
1. Integration: Forces are recomputed from zero, then every active particle is
   integrated with semi-implicit Euler (velocity first, then position).
2. Reproducibility: The time step is always passed in by the caller. Nothing here
   reads a clock, so identical state and dt give identical results.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import numpy as np

from anomalysim.config import (
    FAMILY_RANGE, FLAVOR_RANGE, HEADING_RANGE, LS, SEED_PAIRS, SPAWN_RANGE
)
from anomalysim.controller.forces import accumulate_forces
from anomalysim.model.vectors import gen_f32_3, gen_f64_3, normalize, scale

if TYPE_CHECKING:
    from anomalysim.model.particles import Simulation

logger = logging.getLogger(__name__)


def advance(simulation: Simulation, dt: float) -> None:
    """
    Advance the simulation by one step of size ``dt``.

    1. Reset and accumulate pairwise forces (O(n^2)).
    2. v += F * dt for every active particle.
    3. position += v * dt with the updated velocity.

    Heading and speed are re-derived from the new velocity. A particle whose
    velocity drops to exactly zero keeps its previous heading.

    Args:
        simulation: The arena to mutate.
        dt: Fixed time quantum, must be positive.

    Raises:
        ValueError: If dt is not a positive finite number.
    """
    if not (dt > 0.0 and np.isfinite(dt)):
        raise ValueError(f"Time step must be a positive finite number, got {dt}.")

    accumulate_forces(simulation)

    idx = simulation.active_indices()
    if idx.size == 0:
        return

    velocities = simulation.directions[idx] * simulation.speeds[idx, None]
    velocities += simulation.forces[idx] * dt

    speeds = np.linalg.norm(velocities, axis=1)
    moving = speeds > 0.0
    directions = simulation.directions[idx]
    directions[moving] = velocities[moving] / speeds[moving, None]

    positions = simulation.positions[idx].astype(np.float64) + velocities * dt

    # Guard the arena against a runaway value from a pathological configuration
    finite = np.all(np.isfinite(positions), axis=1) & np.isfinite(speeds)
    if not np.all(finite):
        logger.warning(f"Non-finite state for particles {idx[~finite].tolist()}; keeping previous state.")
        idx, positions = idx[finite], positions[finite]
        speeds, directions = speeds[finite], directions[finite]

    simulation.positions[idx] = positions.astype(np.float32)
    simulation.directions[idx] = directions
    simulation.speeds[idx] = speeds

    logger.debug(
        f"Step dt={dt}: {idx.size} active, KE={simulation.kinetic_energy():.6g}, "
        f"|net F|={np.linalg.norm(simulation.net_force()):.3g}"
    )


def populate(
    simulation: Simulation,
    rng: Optional[np.random.Generator] = None,
    pairs: int = SEED_PAIRS,
) -> None:
    """
    Default seeding policy: ``pairs`` times, one electron and one quark.

    Positions are drawn from SPAWN_RANGE on every axis. Velocities are random
    headings from HEADING_RANGE, normalized and scaled by LS. Quarks are
    secondary with family and flavor drawn from FAMILY_RANGE / FLAVOR_RANGE.
    """
    if pairs < 0:
        raise ValueError(f"pairs must be non-negative, got {pairs}.")
    rng = rng if rng is not None else np.random.default_rng()

    for _ in range(pairs):
        simulation.create_elementary(
            gen_f32_3(*SPAWN_RANGE, rng),
            scale(normalize(gen_f64_3(*HEADING_RANGE, rng)), LS),
            True,
        )
        simulation.create_composite(
            gen_f32_3(*SPAWN_RANGE, rng),
            scale(normalize(gen_f64_3(*HEADING_RANGE, rng)), LS),
            True,
            True,
            int(rng.integers(*FAMILY_RANGE)),
            int(rng.integers(*FLAVOR_RANGE)),
        )

    logger.info(f"Seeded simulation with {2 * pairs} particles ({pairs} electron/quark pairs).")
