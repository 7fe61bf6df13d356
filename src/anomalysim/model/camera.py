"""
Camera Pose & Navigation Primitives
===================================
Eye / target / up triple with instantaneous move and rotate operations.

Conventions:
    - forward = target - eye (its length is the look distance).
    - right = forward x up.
    - All rotations are right-handed about their axis; the sign of the magnitude
      selects the direction.
    - ``up`` is a unit reference axis. It is orthogonalized against forward at
      construction and by every roll. Pitch (rotate_vertical) leaves it fixed and
      is clamped to +-PITCH_LIMIT from the plane orthogonal to it, so the view
      can never flip through the poles.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from anomalysim.config import DEFAULT_EYE, DEFAULT_TARGET, DEFAULT_UP, PITCH_LIMIT
from anomalysim.model.vectors import normalize

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Pose = Tuple["npt.NDArray[np.float32]", "npt.NDArray[np.float32]", "npt.NDArray[np.float32]"]


class MoveAxis(Enum):
    FORWARD = "forward"
    SIDEWAYS = "sideways"
    ELEVATION = "elevation"


class RotationAxis(Enum):
    HORIZONTAL = "horizontal"  # yaw about up
    VERTICAL = "vertical"      # pitch about right
    ROLL = "roll"              # roll about forward


def _vec32(v) -> npt.NDArray[np.float32]:
    return np.array(v, dtype=np.float32).reshape(3)


def _rotate(v: npt.NDArray[np.float64], axis: npt.NDArray[np.float64], angle: float) -> npt.NDArray[np.float64]:
    """Rotate ``v`` about the unit ``axis`` by ``angle`` radians."""
    return Rotation.from_rotvec(axis * angle).apply(v)


@dataclass(eq=False)
class Camera:
    eye: npt.NDArray[np.float32] = field(default_factory=lambda: _vec32(DEFAULT_EYE))
    target: npt.NDArray[np.float32] = field(default_factory=lambda: _vec32(DEFAULT_TARGET))
    up: npt.NDArray[np.float32] = field(default_factory=lambda: _vec32(DEFAULT_UP))

    def __post_init__(self) -> None:
        self.eye = _vec32(self.eye)
        self.target = _vec32(self.target)
        self.up = _vec32(self.up)

        forward = normalize(self._forward())
        if not forward.any():
            raise ValueError("Camera eye and target coincide; the look direction is undefined.")
        up = self.up.astype(np.float64)
        up = normalize(up - np.dot(up, forward) * forward)
        if not up.any():
            raise ValueError("Camera up vector is zero or parallel to the look direction.")
        self.up = up.astype(np.float32)

    # ------------------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------------------

    def _forward(self) -> npt.NDArray[np.float64]:
        return self.target.astype(np.float64) - self.eye.astype(np.float64)

    @property
    def forward(self) -> npt.NDArray[np.float64]:
        """Unit look direction."""
        return normalize(self._forward())

    @property
    def right(self) -> npt.NDArray[np.float64]:
        """Unit forward x up (zero when the frame is degenerate)."""
        return normalize(np.cross(self._forward(), self.up.astype(np.float64)))

    @property
    def look_distance(self) -> float:
        return float(np.linalg.norm(self._forward()))

    @property
    def pitch(self) -> float:
        """Angle between forward and the plane orthogonal to up, in radians."""
        return float(np.arcsin(np.clip(np.dot(self.forward, normalize(self.up.astype(np.float64))), -1.0, 1.0)))

    def pose(self) -> Pose:
        return self.eye.copy(), self.target.copy(), self.up.copy()

    def copy(self) -> Camera:
        camera = Camera.__new__(Camera)
        camera.eye, camera.target, camera.up = self.pose()
        return camera

    # ------------------------------------------------------------------------------
    # Movement (translate eye and target together)
    # ------------------------------------------------------------------------------

    def _translate(self, offset: npt.NDArray[np.float64]) -> None:
        self.eye = (self.eye.astype(np.float64) + offset).astype(np.float32)
        self.target = (self.target.astype(np.float64) + offset).astype(np.float32)

    def move_forward(self, m: float) -> None:
        self._translate(self.forward * m)

    def move_sideways(self, m: float) -> None:
        self._translate(self.right * m)

    def move_elevation(self, m: float) -> None:
        self._translate(normalize(self.up.astype(np.float64)) * m)

    # ------------------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------------------

    def _set_forward(self, forward: npt.NDArray[np.float64]) -> None:
        self.target = (self.eye.astype(np.float64) + forward).astype(np.float32)

    def rotate_horizontal(self, m: float) -> None:
        """Yaw: rotate forward about up. Positive turns left (counter-clockwise seen from up)."""
        axis = normalize(self.up.astype(np.float64))
        if not axis.any():
            return
        self._set_forward(_rotate(self._forward(), axis, m))

    def rotate_vertical(self, m: float) -> None:
        """Pitch: rotate forward about right, toward up for positive ``m``, clamped at the poles."""
        axis = self.right
        if not axis.any():
            logger.debug("Pitch skipped: forward is parallel to up.")
            return
        current = self.pitch
        wanted = float(np.clip(current + m, -PITCH_LIMIT, PITCH_LIMIT))
        # about right = forward x up, a positive angle carries forward toward up
        self._set_forward(_rotate(self._forward(), axis, wanted - current))

    def rotate_up(self, m: float) -> None:
        """Roll: rotate up about forward. Up leaves unit length and orthogonal to forward."""
        axis = self.forward
        if not axis.any():
            return
        up = self.up.astype(np.float64)
        up = normalize(up - np.dot(up, axis) * axis)
        if not up.any():
            return
        self.up = normalize(_rotate(up, axis, m)).astype(np.float32)

    # ------------------------------------------------------------------------------
    # Axis dispatch
    # ------------------------------------------------------------------------------

    def apply_move(self, axis: MoveAxis, amount: float) -> None:
        if axis is MoveAxis.FORWARD:
            self.move_forward(amount)
        elif axis is MoveAxis.SIDEWAYS:
            self.move_sideways(amount)
        elif axis is MoveAxis.ELEVATION:
            self.move_elevation(amount)
        else:
            raise ValueError(f"Unknown move axis: {axis!r}")

    def apply_rotation(self, axis: RotationAxis, amount: float) -> None:
        if axis is RotationAxis.HORIZONTAL:
            self.rotate_horizontal(amount)
        elif axis is RotationAxis.VERTICAL:
            self.rotate_vertical(amount)
        elif axis is RotationAxis.ROLL:
            self.rotate_up(amount)
        else:
            raise ValueError(f"Unknown rotation axis: {axis!r}")
