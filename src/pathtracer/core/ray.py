"""Ray data structure and vector utilities for Monte Carlo path tracing.

This module provides the fundamental Ray dataclass and the vector helpers used
by every other module. Kernel-side helpers are Taichi functions operating on
double precision vectors; the host-side ``normalize_host`` is used while
building scenes and cameras, where a degenerate vector is a configuration
error rather than something to silently paper over.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Double precision 3D vectors: the box scene uses walls of radius 1e5.
vec3 = ti.types.vector(3, ti.f64)

# Vectors shorter than this cannot be normalized safely
DEGENERATE_LENGTH = 1e-12


class DegenerateVectorError(ValueError):
    """Raised when a zero or near-zero vector would have to be normalized."""


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Must be unit length
            wherever the ray is consumed; callers normalize on construction.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector (already normalized).

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Returns the zero vector for degenerate input instead of propagating
    NaNs through a kernel. Scene and camera setup reject degenerate data on
    the host, so this only matters for inputs that are zero by accident of
    floating point.
    """
    result = vec3(0.0, 0.0, 0.0)
    length = tm.length(v)
    if length > DEGENERATE_LENGTH:
        result = v / length
    return result


@ti.func
def build_onb_from_normal(normal: vec3):
    """Build an orthonormal basis with ``normal`` as the z-axis.

    The reference axis is switched when the normal is close to the x-axis so
    the cross product never degenerates.

    Args:
        normal: The surface normal (unit length).

    Returns:
        A tuple (tangent, bitangent, normal) forming an orthonormal basis.
    """
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.1:
        a = vec3(0.0, 1.0, 0.0)
    tangent = normalize(tm.cross(a, normal))
    bitangent = tm.cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def local_to_world(local_dir: vec3, tangent: vec3, bitangent: vec3, normal: vec3) -> vec3:
    """Transform a direction from local (z-up) to world coordinates."""
    return local_dir.x * tangent + local_dir.y * bitangent + local_dir.z * normal


# =============================================================================
# Host-side helpers
# =============================================================================


def normalize_host(v: npt.ArrayLike, what: str = "vector") -> npt.NDArray[np.float64]:
    """Normalize a vector on the host, rejecting degenerate input.

    Args:
        v: The vector to normalize (any 3-element array-like).
        what: Name used in the error message.

    Returns:
        A float64 unit vector.

    Raises:
        DegenerateVectorError: If the vector has (near-)zero length.
    """
    arr = np.asarray(v, dtype=np.float64)
    length = float(np.linalg.norm(arr))
    if not np.isfinite(length) or length <= DEGENERATE_LENGTH:
        raise DegenerateVectorError(f"Cannot normalize {what} {arr.tolist()}: zero length")
    return arr / length
