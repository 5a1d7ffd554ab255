"""Output module for writing rendered images.

Components:
    export: Gamma encoding and PPM/PNG file writers
"""

from .export import DEFAULT_GAMMA, encode_pixels, format_ppm, save_png, save_ppm

__all__ = [
    "DEFAULT_GAMMA",
    "encode_pixels",
    "format_ppm",
    "save_ppm",
    "save_png",
]
