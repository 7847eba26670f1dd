"""
Colour Ramp
===========
Defines the colour value type and the discretized gradient used to colour
sampled values.

Why is this file needed?
------------------------
1. Sharing: Markers hold a gradient KEY ("0.00" .. "1.00"), never a colour
   value. Refreshing the table in place recolours every marker that refers to
   it without touching the markers themselves.
2. Consistency: Animated and static colouring use the very same table, so a
   sample ends a transition with exactly the colour a static recolour would
   give it.

Classes:
    Colour: Immutable RGB triple with components in [0, 1].
    GradientEntry: Mutable slot of the gradient table.
    GradientTable: 101 entries keyed by ramp position.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Dict, Iterator, List, Tuple

import numpy as np

from surfaceviz.config import GRADIENT_STEPS
from surfaceviz.utils import clamp, round_to_2_decimals

logger = logging.getLogger(__name__)

# Key strings indexed by the rounded ramp position, 0 -> "0.00" .. 100 -> "1.00"
_KEYS = np.array([round_to_2_decimals(i / GRADIENT_STEPS) for i in range(GRADIENT_STEPS + 1)], dtype="<U5")


def _key_index(ramp_positions):
    """Clamp to [0, 1] and round half up to the nearest 0.01 step (NaN counts as 0)."""
    clipped = np.clip(np.nan_to_num(np.asarray(ramp_positions, dtype=np.float64), nan=0.0), 0.0, 1.0)
    return np.floor(clipped * GRADIENT_STEPS + 0.5).astype(np.intp)


@dataclass(frozen=True)
class Colour:
    red: float
    green: float
    blue: float

    @staticmethod
    def from_hex(value: str) -> Colour:
        """Parse '#RRGGBB' (the leading '#' is optional)."""
        text = value.lstrip("#")
        if len(text) != 6:
            raise ValueError(f"Expected a colour in '#RRGGBB' form, got '{value}'.")
        r, g, b = (int(text[i:i + 2], 16) for i in (0, 2, 4))
        return Colour(r / 255.0, g / 255.0, b / 255.0)

    def to_hex(self) -> str:
        return "#" + "".join(f"{round(c * 255):02X}" for c in self.as_tuple())

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    def interpolate(self, end: Colour, t: float) -> Colour:
        """
        Linear interpolation from this colour towards `end`.
        t = 0 returns this colour, t = 1 returns `end`.
        """
        t = clamp(t, 0.0, 1.0)
        return Colour(
            self.red * (1 - t) + end.red * t,
            self.green * (1 - t) + end.green * t,
            self.blue * (1 - t) + end.blue * t,
        )


class GradientEntry:
    """
    One slot of the gradient table.
    The instance is shared by every marker using it; only `colour` changes.
    """
    __slots__ = ("key", "colour")

    def __init__(self, key: str, colour: Colour) -> None:
        self.key = key
        self.colour = colour

    def __repr__(self) -> str:
        return f"GradientEntry({self.key!r}, {self.colour.to_hex()})"


class GradientTable:
    """
    Discretized colour ramp between the max-value and min-value colours.

    Ramp position 0.00 holds the max-value colour and 1.00 the min-value
    colour. Together with `value_fraction` (0 at the maximum value) a sample at
    the maximum ends up with the max-value colour.
    """
    MIN_KEY = "0.00"
    MAX_KEY = "1.00"

    def __init__(self) -> None:
        self._entries: Dict[str, GradientEntry] = {}
        self._listeners: List[Callable[[GradientTable], None]] = []
        self.min_colour: Colour | None = None
        self.max_colour: Colour | None = None

    # --- Construction ---

    @staticmethod
    def positions() -> Iterator[Tuple[str, float]]:
        for i in range(GRADIENT_STEPS + 1):
            position = i / GRADIENT_STEPS
            yield round_to_2_decimals(position), position

    def build(self, min_colour: Colour, max_colour: Colour) -> None:
        """Create all entries. Existing entries are refreshed instead of replaced."""
        if self._entries:
            self.refresh(min_colour, max_colour)
            return

        self.min_colour, self.max_colour = min_colour, max_colour
        for key, position in self.positions():
            self._entries[key] = GradientEntry(key, max_colour.interpolate(min_colour, position))
        logger.debug(f"Gradient built with {len(self._entries)} entries.")

    def refresh(self, min_colour: Colour, max_colour: Colour) -> None:
        """Update the colours in place. The key set and the entry objects stay the same."""
        if not self._entries:
            self.build(min_colour, max_colour)
            return

        self.min_colour, self.max_colour = min_colour, max_colour
        for key, position in self.positions():
            self._entries[key].colour = max_colour.interpolate(min_colour, position)

        logger.debug(f"Gradient refreshed ({max_colour.to_hex()} -> {min_colour.to_hex()}).")
        for listener in list(self._listeners):
            listener(self)

    def subscribe(self, listener: Callable[[GradientTable], None]) -> None:
        """Call `listener(table)` after every refresh."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[GradientTable], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- Lookup ---

    @staticmethod
    def key_for(ramp_position: float) -> str:
        """Clamp to [0, 1], then round half up to the 2-decimal key (0.125 -> "0.13")."""
        return str(_KEYS[_key_index(float(ramp_position))])

    @staticmethod
    def keys_for(ramp_positions: np.ndarray) -> np.ndarray:
        """Vectorised `key_for` for whole grids."""
        return _KEYS[_key_index(ramp_positions)]

    def entry(self, key: str) -> GradientEntry:
        """Entry for a key; unknown keys fall back to the 0.00 entry."""
        found = self._entries.get(key)
        if found is None:
            found = self._entries[self.MIN_KEY]
        return found

    def lookup(self, ramp_position: float) -> GradientEntry:
        return self.entry(self.key_for(ramp_position))

    def colour(self, key: str) -> Colour:
        return self.entry(key).colour

    def rgb_array(self, keys: np.ndarray) -> np.ndarray:
        """(N, 3) float array of colours for an array of keys."""
        keys = np.asarray(keys)
        if keys.size == 0:
            return np.empty((0, 3), dtype=np.float64)
        unique, inverse = np.unique(keys, return_inverse=True)
        palette = np.array([self.colour(str(k)).as_tuple() for k in unique], dtype=np.float64)
        return palette[inverse.reshape(-1)]

    # --- Introspection ---

    @property
    def is_built(self) -> bool:
        return bool(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
