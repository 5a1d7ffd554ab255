"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    random_stream: Per-worker PCG32 random number streams
    integrator: Radiance estimator (path tracing with next-event estimation)
    renderer: Sub-pixel sampling and row-batch scheduling

All compute-intensive operations are Taichi functions and kernels.
"""

from .random_stream import EntropyUnavailableError, RandomStreams
from .ray import (
    DEGENERATE_LENGTH,
    DegenerateVectorError,
    Ray,
    build_onb_from_normal,
    local_to_world,
    make_ray,
    normalize,
    normalize_host,
    ray_at,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports
# (they depend on scene, which depends on core.ray). Import them directly:
#   from src.pathtracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "normalize",
    "normalize_host",
    "build_onb_from_normal",
    "local_to_world",
    "DEGENERATE_LENGTH",
    "DegenerateVectorError",
    "RandomStreams",
    "EntropyUnavailableError",
]
