"""Scene module: scene container, lights and the reference scene.

Components:
    scene: Validated sphere list uploaded to Taichi fields; nearest-hit query
    lights: Uniform light-surface sampling and binary visibility
    box: Factory for the box test scene and its camera
"""

from .box import BoxSceneParams, create_box_scene, create_box_spheres
from .lights import VISIBILITY_TOLERANCE, sample_light, sample_sphere_surface, visible
from .scene import T_MAX, Scene, SceneConfigurationError, SphereInfo

__all__ = [
    # Scene container
    "Scene",
    "SphereInfo",
    "SceneConfigurationError",
    "T_MAX",
    # Lights
    "sample_sphere_surface",
    "sample_light",
    "visible",
    "VISIBILITY_TOLERANCE",
    # Box scene
    "BoxSceneParams",
    "create_box_scene",
    "create_box_spheres",
]
