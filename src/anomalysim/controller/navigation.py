"""
Held-key navigation.

Key press/release events only flip flags in an InputState. Once per rendered
frame, update_camera() turns the held flags into one fixed-size camera
increment each, so held-key movement runs at frame rate.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from anomalysim.config import CAMERA_STEP, MOUSE_SENSITIVITY
from anomalysim.model.camera import Camera, MoveAxis, RotationAxis


class Action(Enum):
    FORWARD = "forward"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    ROLL_LEFT = "roll_left"
    ROLL_RIGHT = "roll_right"
    YAW_LEFT = "yaw_left"
    YAW_RIGHT = "yaw_right"
    PITCH_UP = "pitch_up"
    PITCH_DOWN = "pitch_down"
    TOGGLE_ROTATION = "toggle_rotation"


KEY_BINDINGS: Dict[str, Action] = {
    "W": Action.FORWARD,
    "S": Action.BACK,
    "A": Action.LEFT,
    "D": Action.RIGHT,
    "R": Action.UP,
    "F": Action.DOWN,
    "Q": Action.ROLL_LEFT,
    "E": Action.ROLL_RIGHT,
    "X": Action.YAW_LEFT,
    "C": Action.YAW_RIGHT,
    "T": Action.PITCH_UP,
    "G": Action.PITCH_DOWN,
    "P": Action.TOGGLE_ROTATION,
}

# Held action -> (axis, sign)
_MOVES: Dict[Action, Tuple[MoveAxis, float]] = {
    Action.FORWARD: (MoveAxis.FORWARD, 1.0),
    Action.BACK: (MoveAxis.FORWARD, -1.0),
    Action.RIGHT: (MoveAxis.SIDEWAYS, 1.0),
    Action.LEFT: (MoveAxis.SIDEWAYS, -1.0),
    Action.UP: (MoveAxis.ELEVATION, 1.0),
    Action.DOWN: (MoveAxis.ELEVATION, -1.0),
}
_ROTATIONS: Dict[Action, Tuple[RotationAxis, float]] = {
    Action.ROLL_RIGHT: (RotationAxis.ROLL, 1.0),
    Action.ROLL_LEFT: (RotationAxis.ROLL, -1.0),
    Action.YAW_LEFT: (RotationAxis.HORIZONTAL, 1.0),
    Action.YAW_RIGHT: (RotationAxis.HORIZONTAL, -1.0),
    Action.PITCH_UP: (RotationAxis.VERTICAL, 1.0),
    Action.PITCH_DOWN: (RotationAxis.VERTICAL, -1.0),
}


@dataclass
class InputState:
    """Boolean 'held' flags, one per continuous action, plus the spin toggle."""
    forward: bool = False
    back: bool = False
    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False
    roll_left: bool = False
    roll_right: bool = False
    yaw_left: bool = False
    yaw_right: bool = False
    pitch_up: bool = False
    pitch_down: bool = False
    spin_scene: bool = False

    def press(self, action: Action) -> None:
        if action is Action.TOGGLE_ROTATION:
            self.spin_scene = not self.spin_scene
        else:
            setattr(self, action.value, True)

    def release(self, action: Action) -> None:
        # The toggle only reacts to presses
        if action is not Action.TOGGLE_ROTATION:
            setattr(self, action.value, False)

    def held(self) -> FrozenSet[Action]:
        return frozenset(
            Action(f.name) for f in fields(self)
            if f.name != "spin_scene" and getattr(self, f.name)
        )

    def clear(self) -> None:
        """Release everything (e.g. when the window loses focus). The spin toggle is kept."""
        for f in fields(self):
            if f.name != "spin_scene":
                setattr(self, f.name, False)


def action_for_key(key: str) -> Optional[Action]:
    return KEY_BINDINGS.get(key.upper())


def update_camera(camera: Camera, input_state: InputState, step: float = CAMERA_STEP) -> Camera:
    """
    Pure per-frame transform: (camera, held flags, step) -> new camera.

    Every held flag applies one increment of ``step``. Moves are applied before
    rotations, each group in a fixed order, so the result depends only on the
    inputs. The given camera is not modified.
    """
    result = camera.copy()
    held = input_state.held()
    for action, (axis, sign) in _MOVES.items():
        if action in held:
            result.apply_move(axis, sign * step)
    for action, (axis, sign) in _ROTATIONS.items():
        if action in held:
            result.apply_rotation(axis, sign * step)
    return result


def mouse_look(camera: Camera, dx: float, dy: float, sensitivity: float = MOUSE_SENSITIVITY) -> Camera:
    """
    Pointer motion -> yaw/pitch. Moving right turns right; moving down looks down
    (screen y grows downward).
    """
    result = camera.copy()
    result.rotate_horizontal(-dx * sensitivity)
    result.rotate_vertical(-dy * sensitivity)
    return result
