"""
Main Application Window
=======================
Sidebar with function/point cloud buttons, sliders and colour pickers next to
the 3D view.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: Every control is connected to exactly one SurfaceController
   setter; sliders only report on release so a drag does not start dozens
   of transitions.
"""
from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QPushButton, QLabel,
    QSlider, QColorDialog, QMessageBox, QFormLayout
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
import logging

from surfaceviz.app.application import VISIBLE_APP_NAME
from surfaceviz.config import (
    MIN_RESOLUTION, MAX_RESOLUTION, DEFAULT_RESOLUTION, MIN_Z_UNIT, MAX_Z_UNIT, DEFAULT_Z_UNIT,
    COARSE_OFFSET_LIMIT, FINE_OFFSET_LIMIT
)
from surfaceviz.controller.surface import SurfaceController
from surfaceviz.model.colours import Colour
from surfaceviz.model.point_cloud import LoadError
from surfaceviz.view.widgets.plot_3d import SurfacePlotWidget

logger = logging.getLogger(__name__)

# Sliders are integer based; these factors map them to float values
RESOLUTION_SLIDER_SCALE = 100
Z_UNIT_SLIDER_SCALE = 10


class MainWindow(QMainWindow):
    def __init__(self, controller: SurfaceController) -> None:
        super().__init__()
        self.controller = controller
        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1280, 720)

        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Buttons ---
        buttons = QWidget()
        l_buttons = QVBoxLayout(buttons)
        l_buttons.addWidget(QLabel("Functions:"))
        for name in controller.list_available_functions():
            l_buttons.addWidget(self._button(name, lambda _=False, n=name: self.controller.select_function(n)))
        l_buttons.addWidget(QLabel("Point clouds:"))
        for name in controller.list_available_point_clouds():
            l_buttons.addWidget(self._button(name, lambda _=False, n=name: self.on_point_cloud_clicked(n)))
        l_buttons.addStretch()

        # --- MIDDLE: Sliders & Colours ---
        controls = QWidget()
        form = QFormLayout(controls)

        self.slider_z_unit = self._slider(
            int(MIN_Z_UNIT * Z_UNIT_SLIDER_SCALE), int(MAX_Z_UNIT * Z_UNIT_SLIDER_SCALE),
            int(DEFAULT_Z_UNIT * Z_UNIT_SLIDER_SCALE)
        )
        self.slider_z_unit.sliderReleased.connect(self.on_z_unit_released)
        form.addRow("log10(z axis zoom)", self.slider_z_unit)

        self.slider_x_coarse = self._slider(-COARSE_OFFSET_LIMIT, COARSE_OFFSET_LIMIT, 0)
        self.slider_x_fine = self._slider(-FINE_OFFSET_LIMIT, FINE_OFFSET_LIMIT, 0)
        self.slider_y_coarse = self._slider(-COARSE_OFFSET_LIMIT, COARSE_OFFSET_LIMIT, 0)
        self.slider_y_fine = self._slider(-FINE_OFFSET_LIMIT, FINE_OFFSET_LIMIT, 0)
        for slider in (self.slider_x_coarse, self.slider_x_fine, self.slider_y_coarse, self.slider_y_fine):
            slider.sliderReleased.connect(self.on_offsets_released)
        form.addRow("(x axis offset)*10", self.slider_x_coarse)
        form.addRow("x axis offset", self.slider_x_fine)
        form.addRow("(y axis offset)*10", self.slider_y_coarse)
        form.addRow("y axis offset", self.slider_y_fine)

        self.slider_resolution = self._slider(
            int(round(MIN_RESOLUTION * RESOLUTION_SLIDER_SCALE)),
            int(round(MAX_RESOLUTION * RESOLUTION_SLIDER_SCALE)),
            int(round(DEFAULT_RESOLUTION * RESOLUTION_SLIDER_SCALE))
        )
        self.slider_resolution.sliderReleased.connect(self.on_resolution_released)
        form.addRow("Resolution", self.slider_resolution)

        self.btn_max_colour = self._button("", self.on_max_colour_clicked)
        self.btn_min_colour = self._button("", self.on_min_colour_clicked)
        form.addRow("Max value colour", self.btn_max_colour)
        form.addRow("Min value colour", self.btn_min_colour)
        self._sync_colour_buttons()

        sidebar = QWidget()
        l_sidebar = QHBoxLayout(sidebar)
        l_sidebar.addWidget(buttons)
        l_sidebar.addWidget(controls)
        splitter.addWidget(sidebar)

        # --- RIGHT SIDE: 3D View ---
        self.plot_widget = SurfacePlotWidget(controller)
        splitter.addWidget(self.plot_widget)
        splitter.setStretchFactor(1, 1)

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def on_point_cloud_clicked(self, name: str) -> None:
        try:
            self.controller.select_point_cloud(name)
        except LoadError as e:
            QMessageBox.warning(self, "Point cloud", str(e))

    def on_z_unit_released(self) -> None:
        self.controller.set_z_unit(self.slider_z_unit.value() / Z_UNIT_SLIDER_SCALE)

    def on_offsets_released(self) -> None:
        self.controller.set_offset_controls(
            self.slider_x_coarse.value(), self.slider_x_fine.value(),
            self.slider_y_coarse.value(), self.slider_y_fine.value()
        )

    def on_resolution_released(self) -> None:
        self.controller.set_resolution(self.slider_resolution.value() / RESOLUTION_SLIDER_SCALE)

    def on_max_colour_clicked(self) -> None:
        colour = self._pick_colour(self.controller.state.max_colour)
        if colour is not None:
            self.controller.set_gradient_endpoints(self.controller.state.min_colour, colour)
            self._sync_colour_buttons()

    def on_min_colour_clicked(self) -> None:
        colour = self._pick_colour(self.controller.state.min_colour)
        if colour is not None:
            self.controller.set_gradient_endpoints(colour, self.controller.state.max_colour)
            self._sync_colour_buttons()

    # ------------------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------------------

    def _pick_colour(self, current: Colour) -> Colour | None:
        picked = QColorDialog.getColor(QColor(current.to_hex()), self)
        if not picked.isValid():
            return None
        return Colour.from_hex(picked.name())

    def _sync_colour_buttons(self) -> None:
        for button, colour in ((self.btn_max_colour, self.controller.state.max_colour),
                               (self.btn_min_colour, self.controller.state.min_colour)):
            button.setText(colour.to_hex())
            button.setStyleSheet(f"background-color: {colour.to_hex()};")

    @staticmethod
    def _button(text: str, on_click: Callable) -> QPushButton:
        button = QPushButton(text)
        button.setMinimumWidth(80)
        button.clicked.connect(on_click)
        return button

    @staticmethod
    def _slider(minimum: int, maximum: int, value: int) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(minimum, maximum)
        slider.setValue(value)
        slider.setTickPosition(QSlider.TicksBelow)
        return slider

    def closeEvent(self, event) -> None:
        self.plot_widget.close()
        super().closeEvent(event)
