"""
Application Initialization
==========================
Builds the Universe and either runs it headless or opens the window.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Seeds the Universe (simulation + camera) from the run settings.
3. Hands the Universe to the headless runner or to the Qt main window.

Qt and PyVista are imported only on the windowed path, so headless runs work
without a display.
"""
import logging
import sys
from typing import List, Optional

from anomalysim.config import RunSettings
from anomalysim.controller.universe import FrameStats, Universe
from anomalysim.controller.navigation import InputState
from anomalysim.logging_config import setup_logging

logger = logging.getLogger(__name__)


def run_headless(universe: Universe, frames: int) -> List[FrameStats]:
    """
    Drive ``frames`` frames with no input held and no rendering.

    Returns:
        Stats for every frame, in order.
    """
    input_state = InputState()
    history: List[FrameStats] = []
    for _ in range(frames):
        stones = universe.frame(input_state)
        stats = universe.stats(stones)
        history.append(stats)
        logger.debug(f"{stats}")

    if history:
        last = history[-1]
        logger.info(
            f"Headless run finished: {last.frame} frames, {last.active} active, "
            f"KE={last.kinetic_energy:.6g}, |net F|={last.net_force:.3g}"
        )
    return history


def run_window(universe: Universe) -> int:
    from PySide6.QtWidgets import QApplication
    from anomalysim.view.main_window import MainWindow

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("anomalysim")

    window = MainWindow(universe)
    window.show()

    return app.exec()


def main(settings: Optional[RunSettings] = None) -> int:
    settings = settings if settings is not None else RunSettings()

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    # 2. Seed the Universe
    universe = Universe.seeded(seed=settings.seed, pairs=settings.pairs, dt=settings.dt)
    logger.info(f"Universe ready: {universe.simulation!r}, dt={universe.dt}, seed={settings.seed}")

    # 3. Run
    if settings.headless:
        run_headless(universe, settings.frames)
        return 0
    return run_window(universe)


if __name__ == "__main__":
    sys.exit(main())
