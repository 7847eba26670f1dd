"""
Bivariate Functions
===================
Example surfaces and the (offset, zoom) transform applied when sampling them.

Panning moves the function under a fixed sampling lattice: the sample at
(x, y) always shows f(x - x_offset, y - y_offset). The grid itself never moves,
so its coordinates stay valid keys across pans and animations keep their
step counts.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Dict, Union

import numpy as np
import numpy.typing as npt

from surfaceviz.config import (
    DEFAULT_Z_UNIT, MIN_OFFSET, MAX_OFFSET, MIN_Z_UNIT, MAX_Z_UNIT,
    COARSE_OFFSET_LIMIT, COARSE_OFFSET_MULTIPLIER, FINE_OFFSET_LIMIT
)
from surfaceviz.utils import clamp

logger = logging.getLogger(__name__)

ArrayOrFloat = Union[float, npt.NDArray[np.float64]]
BivariateFunction = Callable[[ArrayOrFloat, ArrayOrFloat], ArrayOrFloat]


@dataclass(frozen=True)
class SurfaceFunction:
    """
    A named function z = f(x, y).
    `vectorized` tells whether `func` accepts NumPy arrays; plain scalar
    callables are wrapped with np.vectorize when a whole grid is sampled.
    """
    name: str
    func: BivariateFunction
    expression: str = ""
    vectorized: bool = True

    def __call__(self, x: ArrayOrFloat, y: ArrayOrFloat) -> ArrayOrFloat:
        return self.func(x, y)


@dataclass(frozen=True)
class FunctionTransform:
    x_offset: float = 0.0
    y_offset: float = 0.0
    z_unit: float = DEFAULT_Z_UNIT

    @property
    def z_zoom(self) -> float:
        """Power-of-ten z multiplier, always > 0."""
        return 10.0 ** self.z_unit

    def with_offsets(self, x_offset: float, y_offset: float) -> FunctionTransform:
        if not (math.isfinite(x_offset) and math.isfinite(y_offset)):
            raise ValueError(f"Offsets must be finite numbers, got ({x_offset}, {y_offset}).")
        return FunctionTransform(
            x_offset=clamp(float(x_offset), MIN_OFFSET, MAX_OFFSET),
            y_offset=clamp(float(y_offset), MIN_OFFSET, MAX_OFFSET),
            z_unit=self.z_unit,
        )

    def with_z_unit(self, z_unit: float) -> FunctionTransform:
        if not math.isfinite(z_unit):
            raise ValueError(f"Z unit must be a finite number, got {z_unit}.")
        return FunctionTransform(self.x_offset, self.y_offset, clamp(float(z_unit), MIN_Z_UNIT, MAX_Z_UNIT))


def compose_offset(coarse: float, fine: float) -> float:
    """
    Offset from the two slider controls: coarse (x10, +-50) and fine (+-10).
    Each control is clamped to its own range first.
    """
    coarse = clamp(round(coarse), -COARSE_OFFSET_LIMIT, COARSE_OFFSET_LIMIT)
    fine = clamp(round(fine), -FINE_OFFSET_LIMIT, FINE_OFFSET_LIMIT)
    return float(coarse * COARSE_OFFSET_MULTIPLIER + fine)


def evaluate(x: float, y: float, transform: FunctionTransform, function: SurfaceFunction) -> float:
    """Value displayed at grid coordinate (x, y)."""
    return float(function(x - transform.x_offset, y - transform.y_offset)) * transform.z_zoom


def evaluate_many(
    xs: npt.NDArray[np.float64],
    ys: npt.NDArray[np.float64],
    transform: FunctionTransform,
    function: SurfaceFunction
) -> npt.NDArray[np.float64]:
    """`evaluate` for whole coordinate arrays."""
    func = function.func if function.vectorized else np.vectorize(function.func, otypes=[np.float64])
    values = func(xs - transform.x_offset, ys - transform.y_offset)
    values = np.broadcast_to(np.asarray(values, dtype=np.float64), np.shape(xs))
    return values * transform.z_zoom


# --- Example functions ---

def _gaussian_cross(x, y):
    return 2.75 / np.exp((x / 3) ** 2 * (y / 3) ** 2)

def _ripple(x, y):
    return np.sin(np.sqrt(np.abs(x ** 2 + y ** 2)))

def _cubic_ripple(x, y):
    return 2 * np.sin(np.sqrt(np.abs((x / 1.5) ** 3 + (y / 1.5) ** 3)))

def _saddle(x, y):
    return -2 * x * y * np.exp(-(x / 4) ** 2 - (y / 4) ** 2)

def _diamond_waves(x, y):
    manhattan = np.abs(x) + np.abs(y)
    return 0.5 * np.cos(manhattan) * manhattan


FUNCTIONS: Dict[str, SurfaceFunction] = {
    f.name: f for f in sorted([
        SurfaceFunction("Function1", _gaussian_cross, "2.75 / exp((x/3)^2 (y/3)^2)"),
        SurfaceFunction("Function2", _ripple, "sin(sqrt(|x^2 + y^2|))"),
        SurfaceFunction("Function3", _cubic_ripple, "2 sin(sqrt(|(x/1.5)^3 + (y/1.5)^3|))"),
        SurfaceFunction("Function4", _saddle, "-2 x y exp(-(x/4)^2 - (y/4)^2)"),
        SurfaceFunction("Function5", _diamond_waves, "0.5 cos(|x| + |y|) (|x| + |y|)"),
    ], key=lambda f: f.name)
}

DEFAULT_FUNCTION: str = "Function1"
