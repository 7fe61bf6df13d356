"""
Configuration & Simulation Constants
====================================
This module serves as the central registry for tuning constants and run settings.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (speed scale, time quantum, camera
   increments) scattered throughout the code.
2. Reproducibility: The fixed time quantum lives here, so the render loop and
   the headless runner always step the simulation by the same amount.

Exports:
    LS (float): Speed scale applied to unit headings at creation.
    TS (float): Fixed simulation time quantum per step.
    RunSettings: Run-time knobs the command line can override.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

# --- Simulation scales ---
LS: float = 1.0
TS: float = 0.01

# --- Seeding policy ---
SEED_PAIRS: int = 10
SPAWN_RANGE: Tuple[float, float] = (0.0, 69.0)
HEADING_RANGE: Tuple[float, float] = (0.0, 10.0)
FAMILY_RANGE: Tuple[int, int] = (0, 3)  # [low, high)
FLAVOR_RANGE: Tuple[int, int] = (0, 1)  # [low, high)

# --- Interaction law ---
COUPLING: float = 10.0
CONFINEMENT: float = 0.05
SOFTENING: float = 0.05

ELEMENTARY_CHARGE: float = -1.0
UP_TYPE_CHARGE: float = 2.0 / 3.0
DOWN_TYPE_CHARGE: float = -1.0 / 3.0

# --- Stones ---
FAMILY_GROWTH: float = 0.2

# --- Camera & input ---
CAMERA_STEP: float = 0.01
MOUSE_SENSITIVITY: float = 1.0 / 400.0
PITCH_LIMIT: float = math.pi / 2.0 - 0.01

DEFAULT_EYE: Tuple[float, float, float] = (0.0, -1.0, 1.0)
DEFAULT_TARGET: Tuple[float, float, float] = (0.0, 0.0, 0.0)
DEFAULT_UP: Tuple[float, float, float] = (0.0, 0.0, 1.0)

# --- Render driver ---
FRAME_INTERVAL_MS: int = 16
WORLD_SCALE: float = 0.01
VIEW_ANGLE_DEG: float = 90.0
CLIPPING_RANGE: Tuple[float, float] = (0.01, 100.0)
BACKGROUND_COLOR: Tuple[float, float, float] = (0.0, 0.0, 1.0)


@dataclass
class RunSettings:
    """Knobs for one run of the application (CLI-overridable)."""
    seed: Optional[int] = None
    pairs: int = SEED_PAIRS
    dt: float = TS
    headless: bool = False
    frames: int = 600
    log_level: int = logging.INFO
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.pairs < 0:
            raise ValueError(f"pairs must be non-negative, got {self.pairs}.")
        if not self.dt > 0.0:
            raise ValueError(f"dt must be positive, got {self.dt}.")
        if self.frames < 0:
            raise ValueError(f"frames must be non-negative, got {self.frames}.")
