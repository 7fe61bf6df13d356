"""
Universe (Core Boundary)
========================
The single object the render driver talks to.

Why is this file needed?
------------------------
It acts as the seam between the simulation core and its collaborators:
1. The render driver calls frame() once per rendered frame and draws what it returns.
2. Input handlers only ever touch an InputState; the camera update happens here.
3. Everything below this object is free of Qt, VTK and wall-clock time.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from anomalysim.config import CAMERA_STEP, TS
from anomalysim.controller.engine import advance, populate
from anomalysim.controller.navigation import InputState, mouse_look, update_camera
from anomalysim.controller.stones import Stone, generate_view
from anomalysim.model.camera import Camera, MoveAxis, Pose, RotationAxis
from anomalysim.model.particles import ParticleKind, Simulation

if TYPE_CHECKING:
    from anomalysim.model.vectors import VectorLike

logger = logging.getLogger(__name__)


@dataclass
class FrameStats:
    """Per-frame numbers for logging and the window title."""
    frame: int
    active: int
    kinetic_energy: float
    net_force: float
    stones: int


class Universe:
    """
    Owns the simulation and the camera and drives them frame by frame.

    Args:
        simulation: Particle arena (empty by default).
        camera: Camera pose (default pose from config).
        dt: Fixed time quantum used by step() when none is given.
        camera_step: Increment applied per held input flag per frame.
    """

    def __init__(
        self,
        simulation: Optional[Simulation] = None,
        camera: Optional[Camera] = None,
        dt: float = TS,
        camera_step: float = CAMERA_STEP,
    ) -> None:
        if not dt > 0.0:
            raise ValueError(f"dt must be positive, got {dt}.")
        self.simulation = simulation if simulation is not None else Simulation()
        self.camera = camera if camera is not None else Camera()
        self.dt = float(dt)
        self.camera_step = float(camera_step)
        self.frames = 0

    @classmethod
    def seeded(
        cls,
        seed: Optional[int] = None,
        pairs: Optional[int] = None,
        dt: float = TS,
    ) -> Universe:
        """A universe populated with the default seeding policy."""
        universe = cls(dt=dt)
        rng = np.random.default_rng(seed)
        if pairs is None:
            populate(universe.simulation, rng)
        else:
            populate(universe.simulation, rng, pairs)
        return universe

    # --- Simulation ---

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
        return self.simulation.spawn(kind, position, velocity, active, secondary, family, flavor)

    def step(self, dt: Optional[float] = None) -> None:
        advance(self.simulation, self.dt if dt is None else dt)

    def render_view(self) -> List[Stone]:
        return generate_view(self.simulation)

    # --- Camera ---

    def pose(self) -> Pose:
        return self.camera.pose()

    def apply_move(self, axis: MoveAxis, amount: float) -> None:
        self.camera.apply_move(axis, amount)

    def apply_rotation(self, axis: RotationAxis, amount: float) -> None:
        self.camera.apply_rotation(axis, amount)

    def look(self, dx: float, dy: float) -> None:
        """Apply a pointer-motion delta (pixels) to the camera."""
        self.camera = mouse_look(self.camera, dx, dy)

    # --- Frame ---

    def frame(self, input_state: InputState) -> List[Stone]:
        """
        One rendered frame: camera update from held flags, one simulation step,
        then the meshes to draw.
        """
        self.camera = update_camera(self.camera, input_state, self.camera_step)
        self.step()
        self.frames += 1
        return self.render_view()

    def stats(self, stones: Optional[List[Stone]] = None) -> FrameStats:
        sim = self.simulation
        return FrameStats(
            frame=self.frames,
            active=int(sim.active.sum()),
            kinetic_energy=sim.kinetic_energy(),
            net_force=float(np.linalg.norm(sim.net_force())),
            stones=len(stones) if stones is not None else int(sim.active.sum()),
        )
