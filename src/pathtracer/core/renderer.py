"""Render loop: sub-pixel sampling, averaging and row-batch scheduling.

Every pixel is split into a 2x2 grid of sub-pixels. Each sub-pixel averages
``samples_per_subpixel`` radiance estimates of camera rays jittered with a
tent filter; the averages are clamped to [0, 1] and combined with weight 1/4.

Rows are the parallel work unit: within a kernel launch every row runs as an
independent iteration that owns one random stream and writes only its own
pixels. The host launches rows in batches, which is where progress is
reported and cancellation is checked. A path is never interrupted halfway.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.renderer import Renderer
    >>> from src.pathtracer.scene.box import create_box_scene
    >>>
    >>> scene, camera = create_box_scene()
    >>> renderer = Renderer(scene, camera, 480, 360, samples_per_subpixel=4)
    >>> renderer.render(callback=lambda done, total: print(done, total))
    >>> image = renderer.get_image_numpy()
"""

import logging
import threading
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import CameraBasis, PinholeCamera, tent_offset
from src.pathtracer.core.integrator import (
    PRIMARY_DEPTH,
    RR_PROBABILITY,
    RR_START_DEPTH,
    estimate_radiance,
)
from src.pathtracer.core.random_stream import RandomStreams
from src.pathtracer.core.ray import vec3
from src.pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Side length of the sub-pixel grid
SUBPIXEL_GRID = 2

# Default number of rows rendered per kernel launch
DEFAULT_BATCH_ROWS = 8


class RenderCancelled(RuntimeError):
    """Raised when a render is cancelled between row batches."""


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN/Inf channels with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


@ti.data_oriented
class Renderer:
    """Renders a scene through a pinhole camera into an RGB buffer.

    The renderer owns one random stream per image row. Seeding it explicitly
    makes the output bit-identical across runs.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_subpixel: Radiance estimates per sub-pixel.
    """

    def __init__(
        self,
        scene: Scene,
        camera: PinholeCamera,
        width: int,
        height: int,
        samples_per_subpixel: int = 1,
        seed: int | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            scene: The scene to render.
            camera: The camera configuration.
            width: Image width in pixels.
            height: Image height in pixels.
            samples_per_subpixel: Radiance estimates per sub-pixel (>= 1).
            seed: Explicit seed for reproducible output; None seeds from
                operating system entropy.

        Raises:
            ValueError: If samples_per_subpixel or the dimensions are not
                positive.
            DegenerateVectorError: If the camera direction is degenerate.
            EntropyUnavailableError: If seed is None and no entropy source
                is available.
        """
        if samples_per_subpixel < 1:
            raise ValueError(f"samples_per_subpixel must be >= 1, got {samples_per_subpixel}")

        self.scene = scene
        self.camera = CameraBasis(camera, width, height)
        self.streams = RandomStreams(height, seed)
        self._width = width
        self._height = height
        self._samples = samples_per_subpixel
        self._rows_done = 0

        self.image = ti.Vector.field(3, dtype=ti.f64, shape=(height, width))

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def samples_per_subpixel(self) -> int:
        """Get the number of radiance estimates per sub-pixel."""
        return self._samples

    @property
    def samples_per_pixel(self) -> int:
        """Get the total number of radiance estimates per pixel."""
        return self._samples * SUBPIXEL_GRID * SUBPIXEL_GRID

    @property
    def rows_done(self) -> int:
        """Get the number of rows rendered so far."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        return self._rows_done >= self._height

    def reset(self, seed: int | None = None) -> None:
        """Clear the image and reseed the streams for a fresh render."""
        self.image.fill(0.0)
        self.streams.reseed(seed)
        self._rows_done = 0

    @ti.kernel
    def _render_rows(self, row_start: ti.i32, row_end: ti.i32, samples: ti.i32):
        """Render rows [row_start, row_end), counted from the bottom of the image."""
        inv_samples = 1.0 / ti.cast(samples, ti.f64)
        for y in range(row_start, row_end):
            for x in range(self._width):
                pixel = vec3(0.0, 0.0, 0.0)
                for sy in range(SUBPIXEL_GRID):
                    for sx in range(SUBPIXEL_GRID):
                        subpixel = vec3(0.0, 0.0, 0.0)
                        for _ in range(samples):
                            dx = tent_offset(self.streams.next_uniform(y))
                            dy = tent_offset(self.streams.next_uniform(y))
                            ray = self.camera.get_ray(x, y, sx, sy, dx, dy)
                            sample = estimate_radiance(
                                self.scene,
                                self.streams,
                                y,
                                ray,
                                PRIMARY_DEPTH,
                                1,
                                RR_START_DEPTH,
                                RR_PROBABILITY,
                            )
                            subpixel += _sanitize(sample) * inv_samples
                        pixel += tm.clamp(subpixel, 0.0, 1.0) * 0.25
                # Row 0 of the buffer is the top image row
                self.image[self._height - 1 - y, x] = pixel

    def render_progressive(
        self,
        batch_rows: int = DEFAULT_BATCH_ROWS,
        cancel_event: threading.Event | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each batch.

        Args:
            batch_rows: Number of rows per kernel launch.
            cancel_event: Checked before every batch; when set the render
                stops with RenderCancelled.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If batch_rows is not positive.
            RenderCancelled: If cancel_event is set before the render completes.
        """
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")

        while self._rows_done < self._height:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Render cancelled after %d/%d rows", self._rows_done, self._height)
                raise RenderCancelled(
                    f"Render cancelled after {self._rows_done} of {self._height} rows"
                )
            row_end = min(self._rows_done + batch_rows, self._height)
            self._render_rows(self._rows_done, row_end, self._samples)
            self._rows_done = row_end
            yield (self._rows_done, self._height)

    def render(
        self,
        batch_rows: int = DEFAULT_BATCH_ROWS,
        callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Render the image with optional progress callback and cancellation.

        Args:
            batch_rows: Number of rows per kernel launch.
            callback: Called after each batch with (rows_done, total_rows).
            cancel_event: Checked before every batch.

        Raises:
            RenderCancelled: If cancel_event is set before the render completes.
        """
        logger.info(
            "Rendering %dx%d at %d spp (stream entropy %d)",
            self._width,
            self._height,
            self.samples_per_pixel,
            self.streams.seed_entropy,
        )
        start_time = time.perf_counter()

        for done, total in self.render_progressive(batch_rows, cancel_event):
            if callback is not None:
                callback(done, total)

        logger.info("Render finished in %.2fs", time.perf_counter() - start_time)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the rendered image as a NumPy array.

        Returns:
            Array of shape (height, width, 3), top row first, values in [0, 1].
        """
        return np.clip(self.image.to_numpy(), 0.0, 1.0)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self._width}, height={self._height}, "
            f"spp={self.samples_per_pixel}, rows_done={self._rows_done})"
        )
