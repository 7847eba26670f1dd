"""
Point Cloud Loader (.xyz)
=========================
Reads plain text point clouds, one "x y z" triplet per line, commas optional.

Two unit conventions exist among the bundled clouds:
    NORMALIZED: coordinates x 10 x spread, marker radius x 1
    RAW:        (z - 2) shift, coordinates x 2 x spread, marker radius x 3
The convention is chosen per file name, never guessed from the data.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
import os
import re
from typing import Dict, Iterable, List, Tuple

import numpy as np
import numpy.typing as npt

from surfaceviz.config import POINT_CLOUDS_PATH, SPREAD
from surfaceviz.model.colours import GradientTable

logger = logging.getLogger(__name__)

_NUMBER = r"(-?\d+\.\d*(?:[Ee][-+]?\d*)?)"
LINE_PATTERN = re.compile(rf"\s*{_NUMBER},?\s*{_NUMBER},?\s*{_NUMBER}\s*")


class LoadError(Exception):
    """A point cloud could not be read."""


class PointCloudConvention(StrEnum):
    NORMALIZED = "normalized"
    RAW = "raw"

    @property
    def coordinate_scale(self) -> float:
        return 10.0 if self is PointCloudConvention.NORMALIZED else 2.0

    @property
    def radius_scale(self) -> float:
        return 1.0 if self is PointCloudConvention.NORMALIZED else 3.0

    @property
    def z_shift(self) -> float:
        return 0.0 if self is PointCloudConvention.NORMALIZED else -2.0


# Display name -> file name
POINT_CLOUDS: Dict[str, str] = {
    "Rabbit": "rabbit.xyz",
    "Turtle Shell": "turtle.xyz",
    "Benchy": "benchy.xyz",
    "Sphere": "sphere.xyz",
    "Teapot": "teapot.xyz",
    "Helix": "helix.xyz",
}

RAW_SOURCES = frozenset({"teapot.xyz", "helix.xyz"})


def convention_for(source: str) -> PointCloudConvention:
    """Unit convention of a known source; unknown files are treated as normalized."""
    if os.path.basename(source) in RAW_SOURCES:
        return PointCloudConvention.RAW
    return PointCloudConvention.NORMALIZED


@dataclass(frozen=True)
class PointCloudMarker:
    position: Tuple[float, float, float]
    radius_scale: float
    # Every cloud marker shares the max ramp entry; there is no value to colour by
    colour_key: str = GradientTable.MAX_KEY

    def radius(self, base_radius: float) -> float:
        return base_radius * self.radius_scale


@dataclass
class PointCloud:
    name: str
    source: str
    convention: PointCloudConvention
    markers: List[PointCloudMarker] = field(default_factory=list)
    skipped_lines: int = 0

    def __len__(self) -> int:
        return len(self.markers)

    def positions(self) -> npt.NDArray[np.float64]:
        """(N, 3) array of marker positions."""
        if not self.markers:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([m.position for m in self.markers], dtype=np.float64)


class PointCloudLoader:
    def __init__(self, directory: str = POINT_CLOUDS_PATH, spread: float = SPREAD) -> None:
        self.directory = directory
        self.spread = spread

    @staticmethod
    def parse_line(line: str) -> Tuple[float, float, float] | None:
        """The (x, y, z) of a line, or None when the line is not a triplet."""
        match = LINE_PATTERN.fullmatch(line.rstrip("\r\n"))
        if match is None:
            return None
        try:
            return float(match.group(1)), float(match.group(2)), float(match.group(3))
        except ValueError:
            # The pattern admits a dangling exponent such as "1.0E"
            return None

    def marker_for(self, x: float, y: float, z: float, convention: PointCloudConvention) -> PointCloudMarker:
        scale = self.spread * convention.coordinate_scale
        return PointCloudMarker(
            position=(x * scale, y * scale, (z + convention.z_shift) * scale),
            radius_scale=convention.radius_scale,
        )

    def parse(
        self,
        lines: Iterable[str],
        convention: PointCloudConvention,
        name: str = "",
        source: str = ""
    ) -> PointCloud:
        """Convert text lines into markers. Lines that are not triplets are skipped."""
        cloud = PointCloud(name=name, source=source, convention=convention)
        for line in lines:
            triplet = self.parse_line(line)
            if triplet is None:
                cloud.skipped_lines += 1
                continue
            cloud.markers.append(self.marker_for(*triplet, convention))

        if cloud.skipped_lines:
            logger.warning(f"Skipped {cloud.skipped_lines} malformed line(s) in '{source or name}'.")
        return cloud

    def resolve(self, source: str) -> str:
        if os.path.isabs(source):
            return source
        return os.path.join(self.directory, source)

    def available(self, registry: Dict[str, str] = POINT_CLOUDS) -> Dict[str, str]:
        """Registry entries whose file exists, in registry order."""
        found = {name: source for name, source in registry.items() if os.path.isfile(self.resolve(source))}
        missing = sorted(set(registry) - set(found))
        if missing:
            logger.debug(f"Point clouds without a file in '{self.directory}': {', '.join(missing)}")
        return found

    def load(self, source: str, name: str = "", convention: PointCloudConvention | None = None) -> PointCloud:
        """
        Read a .xyz file. Relative paths are resolved against the point cloud
        directory. Raises LoadError when the file cannot be read.
        """
        path = self.resolve(source)
        convention = convention or convention_for(source)
        logger.info(f"Loading point cloud '{name or source}' from: {path} ({convention})")

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                cloud = self.parse(f, convention, name=name or os.path.basename(source), source=source)
        except OSError as e:
            logger.exception(f"Failed to load point cloud: {e}")
            raise LoadError(f"Could not read point cloud '{path}': {e}") from e

        logger.info(f"Loaded {len(cloud)} markers from '{cloud.name}'.")
        return cloud
