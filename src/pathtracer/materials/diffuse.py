"""Ideal diffuse (Lambertian) BRDF.

The diffuse BRDF is constant over the hemisphere:
    f_r(wi, wo) = reflectance / pi

Directions are importance sampled with a cosine-weighted distribution:
    z = sqrt(xi1), r = sqrt(1 - z^2), phi = 2 * pi * xi2
    pdf(wi) = cos(theta) / pi

so that ``f_r * cos(theta) / pdf`` reduces to the reflectance.

Example:
    >>> # Use within a Taichi kernel:
    >>> # direction, pdf = sample_diffuse(normal, streams, stream)
    >>> # value = eval_diffuse(reflectance)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import build_onb_from_normal, local_to_world, normalize, vec3


@ti.func
def eval_diffuse(reflectance: vec3) -> vec3:
    """Evaluate the diffuse BRDF (without the cosine term).

    Args:
        reflectance: The diffuse reflectance (RGB, each component in [0, 1]).

    Returns:
        reflectance / pi, independent of the directions.
    """
    return reflectance / tm.pi


@ti.func
def pdf_diffuse(normal: vec3, direction: vec3) -> ti.f64:
    """Cosine-weighted sampling density of ``direction``.

    Returns:
        cos(theta) / pi, or 0 for directions below the surface.
    """
    cos_theta = tm.dot(normal, direction)
    pdf = 0.0
    if cos_theta > 0.0:
        pdf = cos_theta / tm.pi
    return pdf


@ti.func
def sample_diffuse(normal: vec3, streams: ti.template(), stream: ti.i32):
    """Draw a cosine-weighted direction about ``normal``.

    Args:
        normal: The shading normal (unit length).
        streams: The RandomStreams to draw from.
        stream: Index of the calling work unit's stream.

    Returns:
        A tuple (direction, pdf). ``pdf`` is 0 for the measure-zero grazing
        directions, which callers treat as a terminated path.
    """
    z = ti.sqrt(streams.next_uniform(stream))
    r = ti.sqrt(1.0 - z * z)
    phi = 2.0 * tm.pi * streams.next_uniform(stream)

    tangent, bitangent, n = build_onb_from_normal(normal)
    direction = normalize(local_to_world(vec3(r * ti.cos(phi), r * ti.sin(phi), z), tangent, bitangent, n))
    return direction, pdf_diffuse(normal, direction)
