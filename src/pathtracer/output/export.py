"""Image export utilities for rendered images.

This module turns the renderer's linear RGB buffer into 8-bit pixel values
and writes them to disk.

Supported formats:
    - PPM (plain ASCII "P3", the default output of the command line)
    - PNG (8-bit via Pillow)

Encoding applies exposure, clamps to [0, 1] and gamma-encodes each channel:

    value = floor(clamp(c * exposure) ^ (1 / gamma) * 255 + 0.5)

Example:
    >>> from src.pathtracer.output.export import save_ppm
    >>> from src.pathtracer.core.renderer import Renderer
    >>>
    >>> renderer.render()
    >>> save_ppm(renderer.get_image_numpy(), "image.ppm")
"""

import logging
from os import PathLike

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Default display gamma
DEFAULT_GAMMA = 2.2

# Maximum channel value written to 8-bit formats
MAX_CHANNEL_VALUE = 255


def _check_image(image: npt.NDArray[np.float64]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def encode_pixels(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear image to gamma-encoded 8-bit values.

    Non-finite values are treated as zero.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.2).
        exposure: Multiplier applied before clamping (default 1.0).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the shape is wrong or gamma is not positive.
    """
    linear = np.asarray(image, dtype=np.float64)
    _check_image(linear)
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    linear = np.nan_to_num(linear, nan=0.0, posinf=0.0, neginf=0.0)
    clamped = np.clip(linear * exposure, 0.0, 1.0)
    encoded = np.floor(np.power(clamped, 1.0 / gamma) * MAX_CHANNEL_VALUE + 0.5)
    return encoded.astype(np.uint8)


def format_ppm(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> str:
    """Format an image as plain-text PPM.

    The output is the header ``P3\\n<width> <height>\\n255\\n`` followed by one
    line per image row (top row first) of space-separated ``r g b`` values.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        gamma: Gamma value (default 2.2).
        exposure: Multiplier applied before clamping (default 1.0).

    Returns:
        The PPM document as a string.
    """
    pixels = encode_pixels(image, gamma=gamma, exposure=exposure)
    height, width, _ = pixels.shape

    lines = [f"P3\n{width} {height}\n{MAX_CHANNEL_VALUE}"]
    for row in pixels:
        lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row.tolist()))
    return "\n".join(lines) + "\n"


def save_ppm(
    image: npt.NDArray[np.floating],
    filepath: str | PathLike[str],
    *,
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> None:
    """Save an image as a plain-text PPM file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (conventionally ending in .ppm).
        gamma: Gamma value (default 2.2).
        exposure: Multiplier applied before clamping (default 1.0).

    Raises:
        OSError: If the file cannot be written.
    """
    document = format_ppm(image, gamma=gamma, exposure=exposure)
    with open(filepath, "w", encoding="ascii") as f:
        f.write(document)
    logger.info("Wrote %s (%dx%d)", filepath, np.shape(image)[1], np.shape(image)[0])


def save_png(
    image: npt.NDArray[np.floating],
    filepath: str | PathLike[str],
    *,
    gamma: float = DEFAULT_GAMMA,
    exposure: float = 1.0,
) -> None:
    """Save an image as an 8-bit PNG file.

    Uses the same encoding as the PPM writer.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma value (default 2.2).
        exposure: Multiplier applied before clamping (default 1.0).
    """
    pixels = encode_pixels(image, gamma=gamma, exposure=exposure)

    # Save using Pillow
    pil_image = PILImage.fromarray(pixels)
    pil_image.save(filepath)
    logger.info("Wrote %s (%dx%d)", filepath, np.shape(image)[1], np.shape(image)[0])
