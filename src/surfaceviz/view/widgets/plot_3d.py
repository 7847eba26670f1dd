"""
3D Visualization Widget (PyVista Wrapper)
=========================================
Draws whatever the SurfaceController publishes: sample markers, point cloud
markers and axes. It holds no engine state of its own.
"""
from __future__ import annotations

from typing import Optional
import logging

import numpy as np
import pyvista as pv

from PySide6.QtWidgets import QWidget, QVBoxLayout

from pyvistaqt import QtInteractor

from surfaceviz.controller.surface import SurfaceController, SurfaceFrame
from surfaceviz.model.colours import Colour
from surfaceviz.model.point_cloud import PointCloud

logger = logging.getLogger(__name__)

BACKGROUND_COLOUR = "ghostwhite"


class MarkerUtils:
    @staticmethod
    def frame_to_polydata(frame: SurfaceFrame) -> pv.PolyData:
        """Point set with an RGB array, one point per sample."""
        cloud = pv.PolyData(np.asarray(frame.positions, dtype=np.float64).reshape(-1, 3))
        cloud.point_data["rgb"] = np.asarray(frame.colours, dtype=np.float64).reshape(-1, 3)
        return cloud

    @staticmethod
    def point_cloud_to_polydata(cloud: PointCloud, base_radius: float) -> pv.PolyData:
        """Point set with a per-point 'radius' array for glyph scaling."""
        data = pv.PolyData(cloud.positions())
        data.point_data["radius"] = np.array([m.radius(base_radius) for m in cloud.markers], dtype=np.float64)
        return data

    @staticmethod
    def axes_polydata(length: float) -> pv.PolyData:
        """Three line segments of the given length, centred on the origin."""
        half = length / 2.0
        points = np.array([
            [-half, 0.0, 0.0], [half, 0.0, 0.0],
            [0.0, -half, 0.0], [0.0, half, 0.0],
            [0.0, 0.0, -half], [0.0, 0.0, half],
        ], dtype=np.float64)
        lines = np.array([2, 0, 1, 2, 2, 3, 2, 4, 5], dtype=np.int_)
        return pv.PolyData(points, lines=lines)


class SurfacePlotWidget(QWidget):
    def __init__(self, controller: SurfaceController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.controller = controller

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)
        self.plotter.set_background(BACKGROUND_COLOUR)

        # --- Actors state ---
        self._samples: Optional[pv.PolyData] = None
        self._samples_actor: Optional[pv.Actor] = None
        self._cloud_actor: Optional[pv.Actor] = None
        self._axes_actor: Optional[pv.Actor] = None

        controller.frame_updated.connect(self.on_frame_updated)
        controller.grid_rebuilt.connect(self.on_grid_rebuilt)
        controller.point_cloud_loaded.connect(self.on_point_cloud_loaded)
        controller.gradient_changed.connect(self.on_gradient_changed)

        self.on_grid_rebuilt(len(controller.state.grid))

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def on_grid_rebuilt(self, sample_count: int) -> None:
        """New sample set: drop every actor and start from the current frame."""
        self._clear_all()
        self._draw_axes()

        self._samples = MarkerUtils.frame_to_polydata(self.controller.current_frame())
        self._samples_actor = self.plotter.add_mesh(
            self._samples,
            scalars="rgb",
            rgb=True,
            point_size=self._marker_point_size(),
            render_points_as_spheres=True,
            pickable=False,
        )
        logger.debug(f"Drawing {sample_count} sample markers.")
        self.plotter.reset_camera()
        self.plotter.render()

    def on_frame_updated(self, frame: SurfaceFrame) -> None:
        if self._samples is None or self._samples.n_points != len(frame):
            return
        # In-place update keeps the actor, no re-upload of the topology
        self._samples.points = frame.positions
        self._samples.point_data["rgb"] = frame.colours
        self.plotter.render()

    def on_point_cloud_loaded(self, cloud: PointCloud) -> None:
        self._clear_all()
        if not cloud.markers:
            self.plotter.render()
            return

        data = MarkerUtils.point_cloud_to_polydata(cloud, self.controller.marker_radius)
        glyphs = data.glyph(scale="radius", geom=pv.Sphere(radius=1.0, theta_resolution=8, phi_resolution=8), orient=False)
        self._cloud_actor = self.plotter.add_mesh(
            glyphs,
            color=self.controller.point_cloud_colour().as_tuple(),
            pickable=False,
        )
        self.plotter.reset_camera()
        self.plotter.render()

    def on_gradient_changed(self, _gradient) -> None:
        # Cloud markers all share the max ramp entry
        if self._cloud_actor is not None:
            self._cloud_actor.prop.color = self.controller.point_cloud_colour().as_tuple()
            self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _draw_axes(self) -> None:
        if not self.controller.state.axes_visible:
            return
        self._axes_actor = self.plotter.add_mesh(
            MarkerUtils.axes_polydata(self.controller.axes_length),
            color=Colour(0.0, 0.0, 0.0).as_tuple(),
            line_width=2,
            pickable=False,
        )

    def _marker_point_size(self) -> float:
        # Screen-space size; roughly matches the 0.1 radius spheres at the default zoom
        return max(2.0, 40.0 * self.controller.marker_radius)

    def _clear_all(self) -> None:
        for actor in (self._samples_actor, self._cloud_actor, self._axes_actor):
            if actor is not None:
                self.plotter.remove_actor(actor)
        self._samples = None
        self._samples_actor = None
        self._cloud_actor = None
        self._axes_actor = None

    def close(self) -> bool:
        self.plotter.close()
        return super().close()
