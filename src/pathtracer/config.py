"""Render configuration.

Holds the settings of a command-line render and the Taichi runtime setup.
There are no environment variables and no configuration files; everything
comes from the command line or from these defaults.

Example:
    >>> from src.pathtracer.config import RenderConfig, init_taichi
    >>> config = RenderConfig(total_samples=40)
    >>> config.samples_per_subpixel
    10
    >>> init_taichi()
"""

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Number of sub-pixels per pixel (2x2 grid)
SUBPIXELS_PER_PIXEL = 4


class BackendUnavailableError(RuntimeError):
    """Raised when the requested Taichi backend cannot be started."""


_ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass
class RenderConfig:
    """Settings for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        total_samples: Requested samples per pixel; divided over the four
            sub-pixels.
        seed: Explicit seed for reproducible output, or None for operating
            system entropy.
        output: Path of the PPM file to write.
        batch_rows: Rows per kernel launch (progress granularity).
    """

    width: int = 480
    height: int = 360
    total_samples: int = 4
    seed: int | None = None
    output: str = "image.ppm"
    batch_rows: int = 8

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {self.batch_rows}")

    @property
    def samples_per_subpixel(self) -> int:
        """Get the samples per sub-pixel: total_samples // 4, at least 1."""
        return max(1, self.total_samples // SUBPIXELS_PER_PIXEL)

    @property
    def samples_per_pixel(self) -> int:
        """Get the number of samples per pixel actually rendered."""
        return self.samples_per_subpixel * SUBPIXELS_PER_PIXEL


def init_taichi(arch: str = "cpu", **kwargs) -> None:
    """Initialize the Taichi runtime in double precision.

    Args:
        arch: Backend name: "cpu", "gpu", "cuda", "vulkan" or "metal".
        **kwargs: Extra keyword arguments forwarded to ti.init.

    Raises:
        ValueError: If arch is not a known backend name.
        BackendUnavailableError: If Taichi cannot start the backend, e.g. a
            GPU backend without double precision support.
    """
    if arch not in _ARCHS:
        raise ValueError(f"Unknown Taichi arch {arch!r}; expected one of {sorted(_ARCHS)}")
    logger.debug("Initializing Taichi (arch=%s, default_fp=f64)", arch)
    try:
        ti.init(arch=_ARCHS[arch], default_fp=ti.f64, **kwargs)
    except RuntimeError as exc:
        raise BackendUnavailableError(f"Cannot start Taichi backend {arch!r}: {exc}") from exc
