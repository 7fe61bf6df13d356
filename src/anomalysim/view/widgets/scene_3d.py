"""
3D Scene Widget (PyVista Wrapper)
Draws one frame of stones from a given camera pose.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, TYPE_CHECKING

from PySide6.QtWidgets import QWidget, QVBoxLayout
from PySide6.QtGui import QCloseEvent

from pyvistaqt import QtInteractor
import pyvista as pv
from vtkmodules.vtkInteractionStyle import vtkInteractorStyleUser

from anomalysim.config import BACKGROUND_COLOR, CLIPPING_RANGE, VIEW_ANGLE_DEG, WORLD_SCALE
from anomalysim.view.widgets.vtk_utils import KIND_COLORS, KIND_SCALARS, VtkUtils

if TYPE_CHECKING:
    from anomalysim.controller.stones import Stone
    from anomalysim.model.camera import Pose

logger = logging.getLogger(__name__)


class SceneWidget(QWidget):
    """
    Render collaborator: receives the mesh list and the camera pose once per frame.

    VTK's own mouse/keyboard interaction is switched off; navigation input is
    handled by the main window and reaches this widget only as a pose.
    """

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._vtk_utils = VtkUtils()
        self._stones_actor: Optional[pv.Actor] = None

        self._init_plotter()

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def interactor(self) -> QWidget:
        """The Qt widget that receives keyboard and mouse events."""
        return self.plotter

    def draw(self, stones: Sequence[Stone], pose: Pose, spin_angle: float = 0.0) -> None:
        """
        Replace the drawn stones and apply the camera pose.

        Args:
            stones: Meshes for this frame.
            pose: (eye, target, up) in scaled view space.
            spin_angle: Scene rotation about the y axis, in radians.
        """
        if self.width() == 0 or self.height() == 0:
            return

        merged = self._vtk_utils.merge_stones(stones)
        self._update_stones_layer(merged)

        if self._stones_actor is not None:
            self._stones_actor.orientation = (0.0, math.degrees(spin_angle), 0.0)

        self._apply_pose(pose)
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _update_stones_layer(self, merged: pv.PolyData) -> None:
        if merged.n_points == 0:
            if self._stones_actor is not None:
                self._stones_actor.SetVisibility(False)
            return

        if self._stones_actor is None:
            self._stones_actor = self.plotter.add_mesh(
                merged,
                scalars=KIND_SCALARS,
                cmap=KIND_COLORS,
                clim=[0, len(KIND_COLORS) - 1],
                show_scalar_bar=False,
                smooth_shading=False,
                pickable=False,
                reset_camera=False,
            )
            self._stones_actor.scale = (WORLD_SCALE, WORLD_SCALE, WORLD_SCALE)
        else:
            # Update in place; re-adding the actor every frame flickers
            self._stones_actor.mapper.dataset.copy_from(merged)
            self._stones_actor.SetVisibility(True)

    def _apply_pose(self, pose: Pose) -> None:
        eye, target, up = pose
        camera = self.plotter.camera
        camera.position = tuple(float(c) for c in eye)
        camera.focal_point = tuple(float(c) for c in target)
        camera.up = tuple(float(c) for c in up)
        camera.clipping_range = CLIPPING_RANGE

    def _init_plotter(self) -> None:
        self.plotter.set_background(BACKGROUND_COLOR)
        self.plotter.enable_lightkit()
        self.plotter.camera.view_angle = VIEW_ANGLE_DEG
        # Mouse and keys are routed to the main window instead
        self.plotter.iren.interactor.SetInteractorStyle(vtkInteractorStyleUser())

    def closeEvent(self, event: QCloseEvent) -> None:
        self.plotter.close()
        event.accept()
