"""Light sampling and visibility testing.

The single light is a sphere. Points are drawn uniformly over its whole
surface, so the density with respect to area is ``1 / (4 * pi * r^2)``.
Points on the far side of the light are rejected by the visibility test and
contribute nothing, which keeps the estimate unbiased.

Example:
    >>> # Use within a Taichi kernel:
    >>> # point, normal, pdf = sample_light(scene, streams, stream)
    >>> # v = visible(scene, hit_point, point)  # 0.0 or 1.0
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ray_at, vec3

# Per-axis tolerance for "the shadow ray hit the target point"
VISIBILITY_TOLERANCE = 1e-4


@ti.func
def sample_sphere_surface(center: vec3, radius: ti.f64, streams: ti.template(), stream: ti.i32):
    """Draw a point uniformly over a sphere's surface.

    Args:
        center: The sphere center.
        radius: The sphere radius.
        streams: The RandomStreams to draw from.
        stream: Index of the calling work unit's stream.

    Returns:
        A tuple (point, normal, pdf) with the outward unit normal and the
        area-measure density.
    """
    z = 2.0 * streams.next_uniform(stream) - 1.0
    phi = 2.0 * tm.pi * streams.next_uniform(stream)
    s = ti.sqrt(ti.max(0.0, 1.0 - z * z))

    normal = vec3(s * ti.cos(phi), s * ti.sin(phi), z)
    point = center + normal * radius
    pdf = 1.0 / (4.0 * tm.pi * radius * radius)
    return point, normal, pdf


@ti.func
def sample_light(scene: ti.template(), streams: ti.template(), stream: ti.i32):
    """Draw a point on the scene's light sphere.

    Returns:
        A tuple (point, normal, pdf); see sample_sphere_surface.
    """
    point, normal, pdf = sample_sphere_surface(
        scene.centers[scene.light_index], scene.radii[scene.light_index], streams, stream
    )
    return point, normal, pdf


@ti.func
def visible(scene: ti.template(), a: vec3, b: vec3) -> ti.f64:
    """Binary visibility between two points.

    A shadow ray is cast from ``a`` towards ``b``. The points see each other
    unless the nearest hit lies strictly in front of ``b`` and does not
    coincide with it.

    Returns:
        1.0 if visible, 0.0 if occluded.
    """
    to_b = b - a
    distance = tm.length(to_b)

    result = 1.0
    if distance > 0.0:
        ray = Ray(origin=a, direction=to_b / distance)
        index, t = scene.nearest_hit(ray)
        if index >= 0:
            gap = ti.abs(ray_at(ray, t) - b)
            if gap.max() > VISIBILITY_TOLERANCE and t < distance:
                result = 0.0
    return result
