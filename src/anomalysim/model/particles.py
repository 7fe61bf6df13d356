"""
Particle Data Model
===================
This module holds the authoritative state of every simulated body.

Why is this file needed?
------------------------
1. Arena storage: Particles live in parallel numpy arrays (positions, headings,
   forces, flags) indexed by creation order. The force kernel works on these
   arrays directly, without per-object attribute lookups.
2. Identity: A particle's index is its identity for the lifetime of the run.
   Particles are never removed, only deactivated.

Classes:
    ParticleKind: Elementary ("electron") or Composite ("quark").
    Particle: Immutable snapshot of one particle.
    Simulation: The arena container.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING, List

import numpy as np

from anomalysim.config import DOWN_TYPE_CHARGE, ELEMENTARY_CHARGE, UP_TYPE_CHARGE
from anomalysim.model.vectors import VectorLike, is_finite_3

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class ParticleKind(Enum):
    ELEMENTARY = "electron"
    COMPOSITE = "quark"

    @property
    def code(self) -> int:
        """Small integer tag stored in the arena."""
        return _KIND_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> ParticleKind:
        return _KINDS_BY_CODE[int(code)]


_KIND_CODES = {ParticleKind.ELEMENTARY: 0, ParticleKind.COMPOSITE: 1}
_KINDS_BY_CODE = {v: k for k, v in _KIND_CODES.items()}


def particle_charge(kind: ParticleKind, flavor: int = 0, secondary: bool = False) -> float:
    """
    Charge used by the interaction law.

    Elementary particles carry -1. Composite particles are up-type (+2/3) for an
    even flavor index and down-type (-1/3) for an odd one. The secondary flag
    marks the antiparticle and flips the sign.
    """
    if kind is ParticleKind.ELEMENTARY:
        charge = ELEMENTARY_CHARGE
    else:
        charge = UP_TYPE_CHARGE if flavor % 2 == 0 else DOWN_TYPE_CHARGE
    return -charge if secondary else charge


@dataclass(frozen=True)
class Particle:
    """Read-only view of one particle at the time it was taken."""
    index: int
    kind: ParticleKind
    position: npt.NDArray[np.float32]
    direction: npt.NDArray[np.float64]
    speed: float
    force: npt.NDArray[np.float64]
    active: bool
    secondary: bool = False
    family: int = 0
    flavor: int = 0

    @property
    def velocity(self) -> npt.NDArray[np.float64]:
        return self.direction * self.speed

    @property
    def charge(self) -> float:
        return particle_charge(self.kind, self.flavor, self.secondary)


class Simulation:
    """
    Arena of particles. Row ``i`` of every array belongs to particle ``i``.
    """

    def __init__(self) -> None:
        self.positions: npt.NDArray[np.float32] = np.empty((0, 3), dtype=np.float32)
        self.directions: npt.NDArray[np.float64] = np.empty((0, 3), dtype=np.float64)
        self.speeds: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)
        self.forces: npt.NDArray[np.float64] = np.empty((0, 3), dtype=np.float64)
        self.active: npt.NDArray[np.bool_] = np.empty(0, dtype=np.bool_)
        self.kinds: npt.NDArray[np.int8] = np.empty(0, dtype=np.int8)
        self.secondary: npt.NDArray[np.bool_] = np.empty(0, dtype=np.bool_)
        self.families: npt.NDArray[np.int64] = np.empty(0, dtype=np.int64)
        self.flavors: npt.NDArray[np.int64] = np.empty(0, dtype=np.int64)

    def __len__(self) -> int:
        return self.positions.shape[0]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(particles={len(self)}, active={int(self.active.sum())})"

    # ------------------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------------------

    def spawn(
        self,
        kind: ParticleKind,
        position: VectorLike,
        velocity: VectorLike,
        active: bool = True,
        secondary: bool = False,
        family: int = 0,
        flavor: int = 0,
    ) -> int:
        """
        Append a new particle and return its index.

        Args:
            kind: Elementary or Composite.
            position: World-space position (stored in single precision).
            velocity: Initial velocity vector. Split into a unit heading and a speed.
            active: Whether the particle takes part in forces and rendering.
            secondary: Antiparticle flag (composite only).
            family: Generation index (composite only), any non-negative integer.
            flavor: Flavor index (composite only), any non-negative integer.

        Raises:
            ValueError: On a non-finite position/velocity or a negative index.
        """
        if not isinstance(kind, ParticleKind):
            raise ValueError(f"Unknown particle kind: {kind!r}")
        if not is_finite_3(position):
            raise ValueError(f"Position must be a finite 3-vector, got {position!r}.")
        if not is_finite_3(velocity):
            raise ValueError(f"Velocity must be a finite 3-vector, got {velocity!r}.")
        if int(family) < 0 or int(flavor) < 0:
            raise ValueError(f"Family and flavor must be non-negative, got {family}, {flavor}.")

        if kind is ParticleKind.ELEMENTARY:
            secondary, family, flavor = False, 0, 0

        v = np.asarray(velocity, dtype=np.float64)
        speed = float(np.linalg.norm(v))
        direction = v / speed if speed > 0.0 else np.zeros(3, dtype=np.float64)

        index = len(self)
        self.positions = np.vstack([self.positions, np.asarray(position, dtype=np.float32)])
        self.directions = np.vstack([self.directions, direction])
        self.speeds = np.append(self.speeds, speed)
        self.forces = np.vstack([self.forces, np.zeros(3, dtype=np.float64)])
        self.active = np.append(self.active, bool(active))
        self.kinds = np.append(self.kinds, np.int8(kind.code))
        self.secondary = np.append(self.secondary, bool(secondary))
        self.families = np.append(self.families, np.int64(family))
        self.flavors = np.append(self.flavors, np.int64(flavor))

        logger.debug(f"Spawned {kind.value} #{index} at {self.positions[index]}")
        return index

    def create_elementary(self, position: VectorLike, velocity: VectorLike, active: bool = True) -> int:
        """Append an electron."""
        return self.spawn(ParticleKind.ELEMENTARY, position, velocity, active)

    def create_composite(
        self,
        position: VectorLike,
        velocity: VectorLike,
        active: bool = True,
        secondary: bool = False,
        family: int = 0,
        flavor: int = 0,
    ) -> int:
        """Append a quark carrying a family and flavor tag."""
        return self.spawn(ParticleKind.COMPOSITE, position, velocity, active, secondary, family, flavor)

    # ------------------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------------------

    def deactivate(self, index: int) -> None:
        self._check_index(index)
        self.active[index] = False
        self.forces[index] = 0.0

    def activate(self, index: int) -> None:
        self._check_index(index)
        self.active[index] = True

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"No particle with index {index} (have {len(self)}).")

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    def particle(self, index: int) -> Particle:
        """Snapshot of particle ``index``; later steps do not change it."""
        self._check_index(index)
        return Particle(
            index=index,
            kind=ParticleKind.from_code(self.kinds[index]),
            position=self.positions[index].copy(),
            direction=self.directions[index].copy(),
            speed=float(self.speeds[index]),
            force=self.forces[index].copy(),
            active=bool(self.active[index]),
            secondary=bool(self.secondary[index]),
            family=int(self.families[index]),
            flavor=int(self.flavors[index]),
        )

    @property
    def particles(self) -> List[Particle]:
        return [self.particle(i) for i in range(len(self))]

    def active_indices(self) -> npt.NDArray[np.int64]:
        return np.flatnonzero(self.active)

    def velocities(self) -> npt.NDArray[np.float64]:
        return self.directions * self.speeds[:, None]

    def charges(self) -> npt.NDArray[np.float64]:
        """Per-particle charge, in index order."""
        return np.array(
            [
                particle_charge(ParticleKind.from_code(k), int(fl), bool(sec))
                for k, fl, sec in zip(self.kinds, self.flavors, self.secondary)
            ],
            dtype=np.float64,
        )

    def is_composite(self) -> npt.NDArray[np.bool_]:
        return self.kinds == ParticleKind.COMPOSITE.code

    # --- Diagnostics ---

    def kinetic_energy(self) -> float:
        """Sum of speed^2 / 2 over active particles (unit mass)."""
        return float(0.5 * np.sum(self.speeds[self.active] ** 2))

    def net_force(self) -> npt.NDArray[np.float64]:
        """Total force over active particles; zero up to rounding for internal forces."""
        return self.forces[self.active].sum(axis=0)
