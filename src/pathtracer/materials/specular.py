"""Ideal specular (mirror) BRDF.

A perfect mirror reflects all light into the single direction

    i = 2 (n . o) n - o

Its BRDF is a Dirac delta. Here it is represented by a tolerance test: the
value is ``reflectance / (n . i)`` when ``i`` matches the mirror direction of
``o`` within MIRROR_TOLERANCE per axis and zero otherwise. Paired with the
point-mass pdf of 1 returned by ``sample_specular`` the cosine cancels and an
indirect bounce carries exactly ``reflectance``. The value is meaningless
for light sampling, which is why mirrors never take the direct-light path.

Example:
    >>> # Use within a Taichi kernel:
    >>> # direction, pdf = sample_specular(normal, outgoing)
    >>> # value = eval_specular(reflectance, normal, outgoing, direction)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, vec3

# Per-axis tolerance for matching the mirror direction
MIRROR_TOLERANCE = 1e-4


@ti.func
def mirror_direction(normal: vec3, outgoing: vec3) -> vec3:
    """Mirror ``outgoing`` about ``normal``."""
    return 2.0 * tm.dot(normal, outgoing) * normal - outgoing


@ti.func
def eval_specular(reflectance: vec3, normal: vec3, outgoing: vec3, incoming: vec3) -> vec3:
    """Evaluate the discretized mirror BRDF.

    Args:
        reflectance: The mirror reflectance (RGB, each component in [0, 1]).
        normal: The shading normal (unit length).
        outgoing: Direction towards the viewer.
        incoming: Direction towards the light.

    Returns:
        reflectance / (n . i) for the mirror direction, zero otherwise.
    """
    mirrored = normalize(mirror_direction(normal, outgoing))
    gap = ti.abs(normalize(incoming) - mirrored)
    cos_theta = tm.dot(normal, incoming)

    value = vec3(0.0, 0.0, 0.0)
    if gap.max() <= MIRROR_TOLERANCE and cos_theta > 0.0:
        value = reflectance / cos_theta
    return value


@ti.func
def sample_specular(normal: vec3, outgoing: vec3):
    """Return the mirror direction with its point-mass pdf of 1."""
    return normalize(mirror_direction(normal, outgoing)), 1.0
