"""
Engine State (Data Model)
=========================
This module defines the central data structure for the running application.

Why is this file needed?
------------------------
1. State Management: It holds the selected function, the transform, the grid,
   the gradient and the active transition in one place.
2. Decoupling: The controller mutates this object; views only read from it.
   No Qt here, so the state machine can be tested without a GUI.

Classes:
    DisplayMode: What is on screen.
    EngineState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
import math
from typing import Optional

from surfaceviz.config import (
    DEFAULT_LOWER_LIMIT, DOMAIN_LENGTH, DEFAULT_RESOLUTION, DEFAULT_MIN_COLOUR, DEFAULT_MAX_COLOUR,
    MIN_RESOLUTION, MAX_RESOLUTION
)
from surfaceviz.model.colours import Colour, GradientTable
from surfaceviz.model.functions import FUNCTIONS, DEFAULT_FUNCTION, FunctionTransform, SurfaceFunction
from surfaceviz.model.grid import SampleGrid, ValueRange
from surfaceviz.model.point_cloud import PointCloud
from surfaceviz.model.transition import TransitionPlan, step_count_for_resolution
from surfaceviz.utils import clamp

logger = logging.getLogger(__name__)


class DisplayMode(StrEnum):
    FUNCTION = "function"
    POINT_CLOUD = "point_cloud"


@dataclass
class EngineState:
    """
    Everything the surface controller works on.
    Pass this instance to the controller; views read from it.
    """
    mode: DisplayMode = DisplayMode.FUNCTION
    function: SurfaceFunction = field(default_factory=lambda: FUNCTIONS[DEFAULT_FUNCTION])
    transform: FunctionTransform = field(default_factory=FunctionTransform)

    lower_limit: float = DEFAULT_LOWER_LIMIT
    length: float = DOMAIN_LENGTH
    resolution: float = DEFAULT_RESOLUTION

    grid: SampleGrid = field(default_factory=SampleGrid)
    value_range: Optional[ValueRange] = None

    min_colour: Colour = field(default_factory=lambda: Colour.from_hex(DEFAULT_MIN_COLOUR))
    max_colour: Colour = field(default_factory=lambda: Colour.from_hex(DEFAULT_MAX_COLOUR))
    gradient: GradientTable = field(default_factory=GradientTable)

    point_cloud: Optional[PointCloud] = None
    axes_visible: bool = False
    plan: Optional[TransitionPlan] = None

    @property
    def step_count(self) -> int:
        return step_count_for_resolution(self.resolution)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max) of the sampled lattice."""
        upper = self.lower_limit + self.length
        return self.lower_limit, upper, self.lower_limit, upper

    def set_resolution(self, resolution: float) -> float:
        """Store the resolution clamped to the supported range and return it."""
        if not math.isfinite(resolution):
            raise ValueError(f"Resolution must be a finite number, got {resolution}.")
        self.resolution = clamp(float(resolution), MIN_RESOLUTION, MAX_RESOLUTION)
        return self.resolution

    def rebuild_grid(self) -> None:
        self.grid.rebuild(*self.bounds, self.resolution)
        self.plan = None

    def reset(self) -> None:
        """Back to the start-up configuration (gradient colours are kept)."""
        self.mode = DisplayMode.FUNCTION
        self.function = FUNCTIONS[DEFAULT_FUNCTION]
        self.transform = FunctionTransform()
        self.resolution = DEFAULT_RESOLUTION
        self.grid = SampleGrid()
        self.value_range = None
        self.point_cloud = None
        self.axes_visible = False
        self.plan = None
        logger.info("Engine state has been reset.")
