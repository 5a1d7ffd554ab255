"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera, its per-resolution basis and the tent filter

Ray generation uses image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import WORLD_UP, CameraBasis, PinholeCamera, tent_offset

__all__ = [
    "PinholeCamera",
    "CameraBasis",
    "tent_offset",
    "WORLD_UP",
]
