"""Sphere primitive with analytic ray-sphere intersection.

The intersection solves

    |o + t*d - c|^2 = r^2

for a unit-length direction ``d``. With ``op = c - o`` and ``b = op . d``
the roots are ``t = b -/+ sqrt(b^2 - op.op + r^2)``. Roots closer than
``SELF_INTERSECTION_EPSILON`` are discarded so that a ray leaving a surface
does not immediately hit the surface it starts on.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.geometry.sphere import intersect_sphere
    >>> # Use intersect_sphere within a Taichi kernel:
    >>> # t = intersect_sphere(ray, center, radius)  # NO_HIT on a miss
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, normalize, vec3

# Minimum accepted hit distance (suppresses self-intersection)
SELF_INTERSECTION_EPSILON = 1e-4

# Distance returned by intersect_sphere when the ray misses
NO_HIT = 0.0


@ti.func
def sphere_roots(ray: Ray, center: vec3, radius: ti.f64):
    """Solve the ray-sphere quadratic.

    Args:
        ray: The ray (unit-length direction).
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        A tuple (hit, t_near, t_far). ``hit`` is 0 when the discriminant is
        negative, in which case both distances are 0.
    """
    op = center - ray.origin
    b = tm.dot(op, ray.direction)
    det = b * b - tm.dot(op, op) + radius * radius

    hit = 0
    t_near = 0.0
    t_far = 0.0
    if det >= 0.0:
        root = ti.sqrt(det)
        hit = 1
        t_near = b - root
        t_far = b + root
    return hit, t_near, t_far


@ti.func
def intersect_sphere(ray: Ray, center: vec3, radius: ti.f64) -> ti.f64:
    """Distance to the first intersection in front of the ray.

    Returns:
        The smallest root greater than SELF_INTERSECTION_EPSILON, or NO_HIT
        if the ray misses or both roots are behind the origin.
    """
    hit, t_near, t_far = sphere_roots(ray, center, radius)
    t = NO_HIT
    if hit == 1:
        if t_near > SELF_INTERSECTION_EPSILON:
            t = t_near
        elif t_far > SELF_INTERSECTION_EPSILON:
            t = t_far
    return t


@ti.func
def sphere_normal(center: vec3, point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere surface."""
    return normalize(point - center)
