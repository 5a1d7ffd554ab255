"""Geometry module for the sphere primitive.

Components:
    sphere: Ray-sphere intersection and surface normals

Intersection routines are Taichi functions (@ti.func). A miss is reported
as the NO_HIT sentinel distance.
"""

from .sphere import NO_HIT, SELF_INTERSECTION_EPSILON, intersect_sphere, sphere_normal, sphere_roots

__all__ = [
    "NO_HIT",
    "SELF_INTERSECTION_EPSILON",
    "sphere_roots",
    "intersect_sphere",
    "sphere_normal",
]
