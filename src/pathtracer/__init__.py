"""Monte Carlo path tracer for scenes made of spheres, built on Taichi.

This package renders physically based images by tracing random light paths:
- Unbiased path tracing with next-event estimation and Russian roulette
- Two material models (ideal diffuse, ideal mirror)
- Sphere-only scenes with a single spherical light
- Row-parallel rendering with per-row random streams (reproducible when seeded)

Subpackages:
    core: Rays, random streams, the radiance estimator and the render loop
    geometry: Ray-sphere intersection
    materials: BRDF models and their dispatch
    scene: Scene container, light sampling and the box scene
    camera: Pinhole camera with tent-filtered sub-pixel rays
    output: Gamma encoding and image file writers
"""

__version__ = "0.1.0"
