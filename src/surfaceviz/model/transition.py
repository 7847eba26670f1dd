"""
Animated Transitions
====================
Turns "old values -> new values" into a fixed number of equal z increments,
and maps sample values onto the colour ramp.

Two fractions are involved in colouring and they are kept apart on purpose:
    value fraction: where a value sits in the tracked range, 0 at the maximum
                    and 1 at the minimum.
    ramp position:  index into the GradientTable, 0 at the max-value colour
                    and 1 at the min-value colour.
A value's ramp position equals its value fraction, so the maximum value gets
the max-value colour.

Nothing here knows about timers. A scheduler calls `TransitionEngine.step`
once per tick, which keeps the transition testable by calling it N times.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, Union

import numpy as np
import numpy.typing as npt

from surfaceviz.config import (
    ANIMATION_DURATION, DEFAULT_STEP_COUNT, DENSE_STEP_COUNT, DENSE_RESOLUTION_THRESHOLD
)
from surfaceviz.model.colours import GradientTable
from surfaceviz.model.grid import SampleGrid, ValueRange

logger = logging.getLogger(__name__)


def step_count_for_resolution(resolution: float) -> int:
    """Very dense grids animate in 3 steps instead of 100 to stay responsive."""
    return DENSE_STEP_COUNT if resolution < DENSE_RESOLUTION_THRESHOLD else DEFAULT_STEP_COUNT


def value_fraction(
    value: Union[float, npt.NDArray[np.float64]],
    value_range: ValueRange
) -> Union[float, npt.NDArray[np.float64]]:
    """
    alpha such that value == alpha * min + (1 - alpha) * max, clamped to [0, 1].
    A flat range (min == max) maps everything to 0.
    """
    if value_range.is_degenerate:
        if np.ndim(value) == 0:
            return 0.0
        return np.zeros(np.shape(value), dtype=np.float64)

    fraction = (np.asarray(value, dtype=np.float64) - value_range.max) / (value_range.min - value_range.max)
    fraction = np.clip(fraction, 0.0, 1.0) + 0.0
    if np.ndim(fraction) == 0:
        return float(fraction)
    return fraction


def ramp_position(
    value: Union[float, npt.NDArray[np.float64]],
    value_range: ValueRange
) -> Union[float, npt.NDArray[np.float64]]:
    """GradientTable position of a sample value."""
    return value_fraction(value, value_range)


def colour_keys_for(values: npt.NDArray[np.float64], value_range: Optional[ValueRange]) -> npt.NDArray[np.str_]:
    if value_range is None:
        return np.full(np.shape(values), GradientTable.MIN_KEY, dtype="<U5")
    return GradientTable.keys_for(ramp_position(values, value_range))


def recolour(grid: SampleGrid, value_range: Optional[ValueRange]) -> None:
    """Static recolour of every sample from its current z."""
    grid.colour_keys = colour_keys_for(grid.current_z, value_range).astype("<U5")


@dataclass
class TransitionPlan:
    """
    Per-sample z increments for one animation run.
    Never mutated while being consumed; a new plan replaces it instead.
    """
    delta_per_step: npt.NDArray[np.float64]
    targets: npt.NDArray[np.float64]
    step_count: int
    recolour: bool = True
    delay: float = 0.0
    duration: float = ANIMATION_DURATION
    steps_done: int = field(default=0)

    @property
    def interval(self) -> float:
        """Seconds between two ticks."""
        return self.duration / self.step_count

    @property
    def is_finished(self) -> bool:
        return self.steps_done >= self.step_count

    @property
    def remaining_steps(self) -> int:
        return max(self.step_count - self.steps_done, 0)


class TransitionEngine:
    def __init__(self, duration: float = ANIMATION_DURATION) -> None:
        self.duration = duration

    def plan(
        self,
        grid: SampleGrid,
        step_count: int = DEFAULT_STEP_COUNT,
        recolour: bool = True,
        delay: float = 0.0
    ) -> TransitionPlan:
        """Plan a move from the current z values to the grid's target values."""
        self._check_step_count(step_count)
        targets = np.array(grid.target_z, dtype=np.float64, copy=True)
        deltas = (targets - grid.current_z) / step_count
        logger.debug(f"Planned transition: {deltas.size} samples, {step_count} steps, recolour={recolour}.")
        return TransitionPlan(deltas, targets, step_count, recolour, delay, self.duration)

    def plan_zoom(
        self,
        grid: SampleGrid,
        old_zoom: float,
        new_zoom: float,
        step_count: int = DEFAULT_STEP_COUNT,
        recolour: bool = False,
        delay: float = 0.0
    ) -> TransitionPlan:
        """
        Rescale the current z values by new_zoom / old_zoom without evaluating
        the function again. delta = z * (factor - 1) / step_count.
        """
        self._check_step_count(step_count)
        if old_zoom <= 0 or new_zoom <= 0:
            raise ValueError(f"Zoom factors must be positive, got {old_zoom} -> {new_zoom}.")
        factor = new_zoom / old_zoom
        deltas = grid.current_z * (factor - 1) / step_count
        targets = grid.current_z * factor
        grid.target_z = np.array(targets, copy=True)
        logger.debug(f"Planned zoom transition x{factor:g}: {deltas.size} samples, {step_count} steps.")
        return TransitionPlan(deltas, targets, step_count, recolour, delay, self.duration)

    @staticmethod
    def step(
        grid: SampleGrid,
        plan: TransitionPlan,
        value_range: Optional[ValueRange] = None
    ) -> bool:
        """
        Apply one tick. Returns True once the plan has run all of its steps.
        The last step lands exactly on the planned targets.
        """
        if plan.is_finished:
            return True
        if plan.delta_per_step.shape != grid.current_z.shape:
            raise ValueError("Transition plan does not match the current grid.")

        plan.steps_done += 1
        if plan.is_finished:
            grid.current_z = np.array(plan.targets, copy=True)
        else:
            grid.current_z = grid.current_z + plan.delta_per_step

        if plan.recolour:
            recolour(grid, value_range)
        return plan.is_finished

    def run(self, grid: SampleGrid, plan: TransitionPlan, value_range: Optional[ValueRange] = None) -> None:
        """Apply every remaining step at once."""
        while not self.step(grid, plan, value_range):
            pass

    @staticmethod
    def _check_step_count(step_count: int) -> None:
        if step_count < 1:
            raise ValueError(f"Step count must be at least 1, got {step_count}.")
