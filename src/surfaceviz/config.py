"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It keeps the ranges of every UI control and the animation
   timings in one place instead of scattering magic numbers over the
   controller and the view.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (point clouds) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    POINT_CLOUDS_PATH (str): Absolute path to the bundled .xyz files.
"""
import logging
import sys
import os
from typing import Optional
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/surfaceviz/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Paths
ASSETS_PATH: str = get_resource_path("assets")
POINT_CLOUDS_PATH: str = os.path.join(ASSETS_PATH, "point_clouds")

# Sampled domain (function units)
DEFAULT_LOWER_LIMIT: float = -10.0
DOMAIN_LENGTH: float = 20.0

# Multiplier for display coordinates, allowing visual tweaking
SPREAD: float = 2.0
MARKER_RADIUS: float = 0.1

# Resolution = interval between samples on the x and y axes
MIN_RESOLUTION: float = 0.05
MAX_RESOLUTION: float = 0.55
DEFAULT_RESOLUTION: float = 0.15
MINOR_RESOLUTION_TICK: float = 0.01
MAJOR_RESOLUTION_TICK: float = 0.1
# Below this resolution the grid is too dense for a smooth 100 step animation
DENSE_RESOLUTION_THRESHOLD: float = 0.15

# x/y offsets
MIN_OFFSET: float = -500.0
MAX_OFFSET: float = 500.0
COARSE_OFFSET_LIMIT: int = 50
COARSE_OFFSET_MULTIPLIER: int = 10
FINE_OFFSET_LIMIT: int = 10

# log10 of the z axis zoom
MIN_Z_UNIT: float = -2.0
MAX_Z_UNIT: float = 2.0
DEFAULT_Z_UNIT: float = 0.0

# Animated transitions (seconds)
ANIMATION_DURATION: float = 2.0
DEFAULT_STEP_COUNT: int = 100
DENSE_STEP_COUNT: int = 3
FUNCTION_CHANGE_DELAY: float = 0.3
PARAMETER_CHANGE_DELAY: float = 0.5
RESOLUTION_CHANGE_DELAY: float = 0.3
ZOOM_CHANGE_DELAY: float = 0.5

# Colour ramp endpoints (hex)
DEFAULT_MIN_COLOUR: str = "#7CFC00"  # lawngreen
DEFAULT_MAX_COLOUR: str = "#FF4500"  # orangered
GRADIENT_STEPS: int = 100

# Logging; LOG_FILE = None logs to stdout only
LOG_LEVEL: int = logging.INFO
LOG_FILE: Optional[str] = None

# Zoom-only transitions keep their colours unless this is switched on
RECOLOUR_ON_ZOOM: bool = False

if not os.path.exists(POINT_CLOUDS_PATH):
    print(f"WARNING: Point cloud path not found at {POINT_CLOUDS_PATH}")
