"""
Main Application Window
=======================
Hosts the 3D scene and runs the frame loop.

Why is this file needed?
------------------------
1. Frame loop: A QTimer fires once per frame and asks the Universe for the next
   set of stones, then hands them to the scene widget with the camera pose.
2. Input: Key press/release and pointer motion are translated into InputState
   flags and mouse-look deltas. Nothing here touches particle state directly.
"""
import logging
import time
from typing import Dict, Optional

from PySide6.QtWidgets import QMainWindow
from PySide6.QtCore import Qt, QTimer, QEvent, QObject, QPointF
from PySide6.QtGui import QCloseEvent, QKeyEvent, QMouseEvent

from anomalysim.config import FRAME_INTERVAL_MS
from anomalysim.controller.navigation import Action, InputState, KEY_BINDINGS
from anomalysim.controller.universe import Universe
from anomalysim.view.widgets.scene_3d import SceneWidget

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Anomaly"
STATS_EVERY_N_FRAMES = 60


def _qt_key_bindings() -> Dict[int, Action]:
    """KEY_BINDINGS re-keyed by Qt key code."""
    bindings: Dict[int, Action] = {}
    for key, action in KEY_BINDINGS.items():
        qt_key = getattr(Qt.Key, f"Key_{key}", None)
        if qt_key is not None:
            bindings[int(qt_key.value)] = action
    return bindings


class MainWindow(QMainWindow):
    def __init__(self, universe: Universe) -> None:
        super().__init__()
        self.universe: Universe = universe
        self.input_state: InputState = InputState()

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1280, 800)

        self.scene = SceneWidget(self)
        self.setCentralWidget(self.scene)

        self._key_bindings = _qt_key_bindings()
        self._last_mouse: Optional[QPointF] = None
        self._spin_start: float = time.perf_counter()

        # The VTK widget has focus most of the time; catch its events here
        self.scene.interactor.installEventFilter(self)
        self.scene.interactor.setMouseTracking(True)

        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_INTERVAL_MS)
        self._timer.timeout.connect(self.on_frame)
        self._timer.start()

        logger.info(f"Main window ready ({len(self.universe.simulation)} particles).")

    # ------------------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------------------

    def on_frame(self) -> None:
        stones = self.universe.frame(self.input_state)

        spin = time.perf_counter() - self._spin_start if self.input_state.spin_scene else 0.0
        try:
            self.scene.draw(stones, self.universe.pose(), spin_angle=spin)
        except Exception:
            # Drop this frame; the next tick tries again with fresh state
            logger.exception("Failed to draw frame %d.", self.universe.frames)
            return

        if self.universe.frames % STATS_EVERY_N_FRAMES == 0:
            stats = self.universe.stats(stones)
            self.setWindowTitle(
                f"{VISIBLE_APP_NAME} - frame {stats.frame}, {stats.active} active, KE {stats.kinetic_energy:.3f}"
            )
            logger.debug(f"{stats}")

    # ------------------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------------------

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        etype = event.type()
        if etype == QEvent.Type.KeyPress:
            return self._on_key(event, pressed=True)
        if etype == QEvent.Type.KeyRelease:
            return self._on_key(event, pressed=False)
        if etype == QEvent.Type.MouseMove:
            self._on_mouse_move(event)
            return True
        if etype == QEvent.Type.FocusOut:
            self.input_state.clear()
        return super().eventFilter(watched, event)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if not self._on_key(event, pressed=True):
            super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        if not self._on_key(event, pressed=False):
            super().keyReleaseEvent(event)

    def _on_key(self, event: QKeyEvent, pressed: bool) -> bool:
        if pressed and int(event.key()) == int(Qt.Key.Key_Escape.value):
            self.close()
            return True

        action = self._key_bindings.get(int(event.key()))
        if action is None:
            return False
        if event.isAutoRepeat():
            return True

        if pressed:
            self.input_state.press(action)
        else:
            self.input_state.release(action)
        return True

    def _on_mouse_move(self, event: QMouseEvent) -> None:
        pos = event.position()
        if self._last_mouse is not None:
            delta = pos - self._last_mouse
            self.universe.look(delta.x(), delta.y())
        self._last_mouse = pos

    def closeEvent(self, event: QCloseEvent) -> None:
        self._timer.stop()
        logger.info(f"Closing after {self.universe.frames} frames.")
        self.scene.close()
        event.accept()
