"""Pinhole camera model for primary ray generation.

The camera is described by an origin and a viewing direction. Two image
plane vectors are derived once from the viewport height and the image aspect
ratio:

- cx: points right, length = aspect * viewport_height
- cy: points up, length = viewport_height

A ray through continuous image coordinates ``(u, v)`` in [0, 1]^2 (origin at
the bottom-left) has direction ``normalize(cx * (u - 0.5) + cy * (v - 0.5) + d)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.camera.pinhole import CameraBasis, PinholeCamera
    >>> camera = PinholeCamera(origin=(50, 52, 295.6), direction=(0, -0.042612, -1))
    >>> basis = CameraBasis(camera, width=480, height=360)
    >>> # Use basis.get_ray(x, y, sx, sy, dx, dy) within a Taichi kernel
"""

import logging
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import DegenerateVectorError, Ray, make_ray, normalize, normalize_host

logger = logging.getLogger(__name__)

# World up direction used to orient the image plane
WORLD_UP = (0.0, 1.0, 0.0)


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        origin: Camera position in world space.
        direction: Viewing direction (normalized during setup).
        viewport_height: Height of the image plane at unit distance. The
            default gives a vertical field of view of about 28.8 degrees.
    """

    origin: tuple[float, float, float]
    direction: tuple[float, float, float]
    viewport_height: float = 0.5135


@ti.data_oriented
class CameraBasis:
    """Camera state derived for a given image resolution."""

    def __init__(self, camera: PinholeCamera, width: int, height: int) -> None:
        """Derive the image plane vectors.

        Args:
            camera: Camera position, direction and viewport height.
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If the resolution or viewport height is not positive.
            DegenerateVectorError: If the viewing direction is zero or
                parallel to the world up direction.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if camera.viewport_height <= 0.0:
            raise ValueError(f"Viewport height must be positive, got {camera.viewport_height}")

        self.width = width
        self.height = height

        origin = np.asarray(camera.origin, dtype=np.float64)
        direction = normalize_host(camera.direction, "camera direction")
        try:
            right = normalize_host(np.cross(direction, WORLD_UP), "camera right vector")
        except DegenerateVectorError as exc:
            raise DegenerateVectorError(
                f"Camera direction {camera.direction} is parallel to the up vector {WORLD_UP}"
            ) from exc

        aspect = width / height
        cx = right * (aspect * camera.viewport_height)
        cy = normalize_host(np.cross(cx, direction), "camera up vector") * camera.viewport_height

        self._origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._direction = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._cx = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._cy = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._origin[None] = origin.tolist()
        self._direction[None] = direction.tolist()
        self._cx[None] = cx.tolist()
        self._cy[None] = cy.tolist()

        logger.debug("Camera basis: origin=%s cx=%s cy=%s", origin, cx, cy)

    @ti.func
    def get_ray(self, x: ti.i32, y: ti.i32, sx: ti.i32, sy: ti.i32, dx: ti.f64, dy: ti.f64) -> Ray:
        """Generate a primary ray through a jittered sub-pixel position.

        Args:
            x: Pixel column (0 = left).
            y: Pixel row (0 = bottom).
            sx: Sub-pixel column in the 2x2 grid.
            sy: Sub-pixel row in the 2x2 grid.
            dx: Horizontal filter offset in [-1, 1].
            dy: Vertical filter offset in [-1, 1].

        Returns:
            A ray from the camera origin with unit-length direction.
        """
        u = ((ti.cast(sx, ti.f64) + 0.5 + dx) / 2.0 + ti.cast(x, ti.f64)) / self.width
        v = ((ti.cast(sy, ti.f64) + 0.5 + dy) / 2.0 + ti.cast(y, ti.f64)) / self.height
        d = self._cx[None] * (u - 0.5) + self._cy[None] * (v - 0.5) + self._direction[None]
        return make_ray(self._origin[None], normalize(d))

    def get_info(self) -> dict[str, tuple[float, float, float]]:
        """Get the derived camera vectors for debugging.

        Returns:
            Dictionary with origin, direction, cx and cy.
        """
        return {
            name: tuple(float(f[None][k]) for k in range(3))
            for name, f in (
                ("origin", self._origin),
                ("direction", self._direction),
                ("cx", self._cx),
                ("cy", self._cy),
            )
        }


@ti.func
def tent_offset(u: ti.f64) -> ti.f64:
    """Map a uniform sample in [0, 1) to a tent-distributed offset in [-1, 1).

    Args:
        u: A uniform random number.

    Returns:
        An offset with triangular density peaking at 0.
    """
    r = 2.0 * u
    offset = 0.0
    if r < 1.0:
        offset = ti.sqrt(r) - 1.0
    else:
        offset = 1.0 - ti.sqrt(2.0 - r)
    return offset
