"""
Surface Controller
==================
Orchestrates grid, function sampling, colour ramp, point clouds and animated
transitions. This is the only object the GUI talks to.

Why is this file needed?
------------------------
1. State machine: It switches between showing a function surface and showing
   a point cloud, rebuilding the grid where needed.
2. Routing: Every UI control ends up in one of the setters below, which
   clamp their input before anything reaches the grid.
3. Signals: Renderers subscribe to `frame_updated` (one vectorised frame per
   tick) or register per-sample tick listeners; the controller never touches a
   rendering API itself.

All methods must be called from the GUI thread. A new transition simply
replaces the one in flight, its deltas are computed from whatever z values are
displayed at that moment.

Classes:
    SurfaceFrame: Snapshot of the displayed samples for renderers.
    SurfaceController: The state machine.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Union

import numpy as np
import numpy.typing as npt
from PySide6.QtCore import QObject, Signal

from surfaceviz.config import (
    SPREAD, MARKER_RADIUS, RECOLOUR_ON_ZOOM, FUNCTION_CHANGE_DELAY, PARAMETER_CHANGE_DELAY,
    RESOLUTION_CHANGE_DELAY, ZOOM_CHANGE_DELAY
)
from surfaceviz.controller.scheduler import QtTickScheduler, TickScheduler
from surfaceviz.model.colours import Colour, GradientTable
from surfaceviz.model.functions import FUNCTIONS, SurfaceFunction, compose_offset
from surfaceviz.model.grid import GridCoordinate
from surfaceviz.model.point_cloud import POINT_CLOUDS, PointCloud, PointCloudLoader
from surfaceviz.model.state import DisplayMode, EngineState
from surfaceviz.model.transition import TransitionEngine, TransitionPlan, recolour

logger = logging.getLogger(__name__)

TickListener = Callable[[GridCoordinate, float, Colour], None]


@dataclass
class SurfaceFrame:
    """Display-space positions and colours of every sample, shape (N, 3) each."""
    positions: npt.NDArray[np.float64]
    colours: npt.NDArray[np.float64]
    colour_keys: npt.NDArray[np.str_]

    def __len__(self) -> int:
        return int(self.positions.shape[0])


class SurfaceController(QObject):
    frame_updated = Signal(object)        # SurfaceFrame
    grid_rebuilt = Signal(int)            # number of samples
    mode_changed = Signal(str)            # DisplayMode
    point_cloud_loaded = Signal(object)   # PointCloud
    gradient_changed = Signal(object)     # GradientTable
    range_changed = Signal(object)        # Optional[ValueRange]
    transition_finished = Signal()

    def __init__(
        self,
        state: Optional[EngineState] = None,
        scheduler: Optional[TickScheduler] = None,
        loader: Optional[PointCloudLoader] = None,
        engine: Optional[TransitionEngine] = None,
        recolour_on_zoom: bool = RECOLOUR_ON_ZOOM,
        spread: float = SPREAD,
        initialize: bool = True
    ) -> None:
        super().__init__()
        self.state = state or EngineState()
        self.scheduler = scheduler or QtTickScheduler(self)
        self.loader = loader or PointCloudLoader(spread=spread)
        self.engine = engine or TransitionEngine()
        self.recolour_on_zoom = recolour_on_zoom
        self.spread = spread
        self._tick_listeners: List[TickListener] = []

        self.state.gradient.build(self.state.min_colour, self.state.max_colour)

        if initialize:
            self._initial_display()
            self.select_function(self.state.function)

    # ------------------------------------------------------------------------------
    # Catalogues
    # ------------------------------------------------------------------------------

    @staticmethod
    def list_available_functions() -> Dict[str, SurfaceFunction]:
        return dict(FUNCTIONS)

    def list_available_point_clouds(self) -> Dict[str, str]:
        """Known point clouds that have a readable file."""
        return self.loader.available(POINT_CLOUDS)

    # ------------------------------------------------------------------------------
    # Mode switching
    # ------------------------------------------------------------------------------

    def select_function(self, function: Union[str, SurfaceFunction]) -> None:
        """Display a function. Coming from a point cloud rebuilds the grid first."""
        if isinstance(function, str):
            if function not in FUNCTIONS:
                raise ValueError(f"Unknown function '{function}'.")
            function = FUNCTIONS[function]

        self.state.function = function
        logger.info(f"Displaying function '{function.name}'.")

        if self.state.mode is DisplayMode.POINT_CLOUD:
            self._initial_display()

        self._resample_and_animate(FUNCTION_CHANGE_DELAY)

    def select_point_cloud(self, cloud_id: str) -> PointCloud:
        """
        Display a point cloud by name ("Rabbit") or source ("rabbit.xyz" or a path).
        Raises LoadError and keeps the current display when it cannot be read.
        """
        name = cloud_id
        source = POINT_CLOUDS.get(cloud_id)
        if source is None:
            source = cloud_id
            name = next((n for n, s in POINT_CLOUDS.items() if s == cloud_id), cloud_id)

        cloud = self.loader.load(source, name=name)

        # Function markers go away together with any transition still running
        self.scheduler.stop()
        self.state.plan = None
        self.state.grid.clear()
        self.state.value_range = None
        self.state.axes_visible = False
        self.state.point_cloud = cloud
        self.state.mode = DisplayMode.POINT_CLOUD

        self.mode_changed.emit(str(self.state.mode))
        self.point_cloud_loaded.emit(cloud)
        return cloud

    def _initial_display(self) -> None:
        """Fresh grid with z = 0 and the axes shown."""
        self.scheduler.stop()
        self.state.point_cloud = None
        self.state.mode = DisplayMode.FUNCTION
        self.state.axes_visible = True
        self.state.rebuild_grid()

        self.mode_changed.emit(str(self.state.mode))
        self.grid_rebuilt.emit(len(self.state.grid))

    # ------------------------------------------------------------------------------
    # Configuration setters
    # ------------------------------------------------------------------------------

    def set_resolution(self, resolution: float) -> float:
        """
        Rebuild the grid at the new resolution (clamped to the supported range)
        and animate the function onto it. Returns the value actually used.
        """
        used = self.state.set_resolution(resolution)
        logger.info(f"Resolution set to {used:g} ({self.state.step_count} animation steps).")
        self._initial_display()
        self._resample_and_animate(RESOLUTION_CHANGE_DELAY)
        return used

    def set_offsets(self, x_offset: float, y_offset: float) -> None:
        self.state.transform = self.state.transform.with_offsets(x_offset, y_offset)
        logger.debug(f"Offsets set to ({self.state.transform.x_offset:g}, {self.state.transform.y_offset:g}).")
        if self.state.mode is DisplayMode.FUNCTION:
            self._resample_and_animate(PARAMETER_CHANGE_DELAY)

    def set_offset_controls(self, x_coarse: float, x_fine: float, y_coarse: float, y_fine: float) -> None:
        """Offsets from the coarse (x10) and fine slider pairs."""
        self.set_offsets(compose_offset(x_coarse, x_fine), compose_offset(y_coarse, y_fine))

    def set_z_unit(self, z_unit: float) -> None:
        """
        Change the z zoom to 10 ** z_unit. The displayed values are rescaled
        without evaluating the function again.
        """
        old_zoom = self.state.transform.z_zoom
        self.state.transform = self.state.transform.with_z_unit(z_unit)
        new_zoom = self.state.transform.z_zoom

        if self.state.mode is not DisplayMode.FUNCTION or new_zoom == old_zoom:
            return

        factor = new_zoom / old_zoom
        if self.state.value_range is not None:
            self.state.value_range = self.state.value_range.scaled(factor)
            self.range_changed.emit(self.state.value_range)

        logger.info(f"Z zoom changed {old_zoom:g} -> {new_zoom:g}.")
        plan = self.engine.plan_zoom(
            self.state.grid,
            old_zoom,
            new_zoom,
            step_count=self.state.step_count,
            recolour=self.recolour_on_zoom,
            delay=ZOOM_CHANGE_DELAY
        )
        self._start(plan)

    def set_gradient_endpoints(self, min_colour: Union[Colour, str], max_colour: Union[Colour, str]) -> None:
        """Refresh the colour ramp in place and recolour what is displayed."""
        if isinstance(min_colour, str):
            min_colour = Colour.from_hex(min_colour)
        if isinstance(max_colour, str):
            max_colour = Colour.from_hex(max_colour)

        self.state.min_colour, self.state.max_colour = min_colour, max_colour
        self.state.gradient.refresh(min_colour, max_colour)

        if self.state.mode is DisplayMode.FUNCTION:
            recolour(self.state.grid, self.state.value_range)
            self._publish_frame()

        self.gradient_changed.emit(self.state.gradient)

    # ------------------------------------------------------------------------------
    # Tick surface
    # ------------------------------------------------------------------------------

    def add_tick_listener(self, listener: TickListener) -> None:
        """Call `listener(coordinate, new_z, colour)` for every sample on every tick."""
        self._tick_listeners.append(listener)

    def remove_tick_listener(self, listener: TickListener) -> None:
        if listener in self._tick_listeners:
            self._tick_listeners.remove(listener)

    def current_frame(self) -> SurfaceFrame:
        grid = self.state.grid
        positions = np.column_stack((grid.xs * self.spread, grid.ys * self.spread, grid.current_z))
        return SurfaceFrame(
            positions=positions.reshape(-1, 3),
            colours=self.state.gradient.rgb_array(grid.colour_keys),
            colour_keys=grid.colour_keys.copy()
        )

    def point_cloud_colour(self) -> Colour:
        """Shared colour of all point cloud markers."""
        return self.state.gradient.colour(GradientTable.MAX_KEY)

    @property
    def axes_length(self) -> float:
        return (self.state.length + 2) * self.spread

    @property
    def marker_radius(self) -> float:
        return MARKER_RADIUS

    @property
    def is_animating(self) -> bool:
        return self.state.plan is not None and self.scheduler.is_active

    # ------------------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------------------

    def _resample_and_animate(self, delay: float) -> None:
        state = self.state
        state.value_range = state.grid.resample_targets(state.transform, state.function)
        self.range_changed.emit(state.value_range)

        plan = self.engine.plan(state.grid, step_count=state.step_count, recolour=True, delay=delay)
        self._start(plan)

    def _start(self, plan: TransitionPlan) -> None:
        # Supersedes whatever plan is in flight
        self.state.plan = plan
        self.scheduler.start(plan.step_count, plan.interval, plan.delay, self._on_tick)

    def _on_tick(self) -> bool:
        plan = self.state.plan
        if plan is None:
            return True

        finished = self.engine.step(self.state.grid, plan, self.state.value_range)
        self._publish_frame()

        if finished:
            self.state.plan = None
            logger.debug("Transition finished.")
            self.transition_finished.emit()
        return finished

    def _publish_frame(self) -> None:
        frame = self.current_frame()
        self.frame_updated.emit(frame)

        if not self._tick_listeners:
            return
        grid = self.state.grid
        gradient = self.state.gradient
        for i, (x, y, z) in enumerate(zip(grid.xs.tolist(), grid.ys.tolist(), grid.current_z.tolist())):
            colour = gradient.colour(str(grid.colour_keys[i]))
            for listener in self._tick_listeners:
                listener(GridCoordinate(x, y), z, colour)

