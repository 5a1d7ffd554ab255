"""Box scene configuration.

This module provides a factory for the reference test scene: a room whose
walls are huge spheres (radius 1e5, so their visible patches are nearly
flat), two balls on the floor and a small spherical light under the ceiling.

The box consists of:
- 5 walls (left, right, back, bottom, top); the front is open
- Left wall: red diffuse
- Right wall: blue diffuse
- Back, bottom, top: grey diffuse
- A diffuse ball (left) and a mirror ball (right)
- A spherical light, the only emissive object

Coordinates span roughly x in [1, 99], y in [0, 81.6] with the camera
outside the open front at z = 295.6.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.box import create_box_scene
    >>>
    >>> scene, camera = create_box_scene()
    >>> scene.light_index
    7
"""

from dataclasses import dataclass

from src.pathtracer.camera.pinhole import PinholeCamera
from src.pathtracer.materials.brdf import Material
from src.pathtracer.scene.scene import Scene, SphereInfo

# =============================================================================
# Box Scene Parameters
# =============================================================================


@dataclass
class BoxSceneParams:
    """Parameters for configuring the box scene.

    All parameters default to the reference configuration.

    Attributes:
        light_emission: RGB radiance emitted by the light sphere.
            Default is (50, 50, 50).
        left_wall_color: RGB reflectance of the left wall.
            Default is red (0.75, 0.25, 0.25).
        right_wall_color: RGB reflectance of the right wall.
            Default is blue (0.25, 0.25, 0.75).
        neutral_wall_color: RGB reflectance of the back, bottom and top walls.
            Default is grey (0.75, 0.75, 0.75).

    Example:
        >>> params = BoxSceneParams()
        >>> params.light_emission
        (50.0, 50.0, 50.0)

        >>> # A dimmer, warmer light
        >>> warm = BoxSceneParams(light_emission=(30.0, 25.0, 20.0))
    """

    light_emission: tuple[float, float, float] = (50.0, 50.0, 50.0)
    left_wall_color: tuple[float, float, float] = (0.75, 0.25, 0.25)
    right_wall_color: tuple[float, float, float] = (0.25, 0.25, 0.75)
    neutral_wall_color: tuple[float, float, float] = (0.75, 0.75, 0.75)


# =============================================================================
# Box Scene Constants
# =============================================================================

# Radius of the wall spheres
WALL_RADIUS = 1e5

# Ball materials
DIFFUSE_BALL_COLOR = (0.9, 0.9, 0.9)
MIRROR_BALL_COLOR = (0.999, 0.999, 0.999)
BALL_RADIUS = 16.5

# Light sphere geometry
LIGHT_CENTER = (50.0, 70.0, 81.6)
LIGHT_RADIUS = 5.0

# Index of the light in the sphere list built below
LIGHT_INDEX = 7

# Camera placement
CAMERA_ORIGIN = (50.0, 52.0, 295.6)
CAMERA_DIRECTION = (0.0, -0.042612, -1.0)


# =============================================================================
# Box Scene Factory
# =============================================================================


def create_box_spheres(params: BoxSceneParams | None = None) -> list[SphereInfo]:
    """Build the ordered sphere list of the box scene.

    Args:
        params: Optional BoxSceneParams; defaults to BoxSceneParams().

    Returns:
        Eight spheres: five walls, the two balls, then the light.
    """
    if params is None:
        params = BoxSceneParams()

    left = Material.diffuse(params.left_wall_color)
    right = Material.diffuse(params.right_wall_color)
    neutral = Material.diffuse(params.neutral_wall_color)

    return [
        # Left wall, its surface at x = 1
        SphereInfo((WALL_RADIUS + 1.0, 40.8, 81.6), WALL_RADIUS, material=left),
        # Right wall, x = 99
        SphereInfo((-WALL_RADIUS + 99.0, 40.8, 81.6), WALL_RADIUS, material=right),
        # Back wall, z = 0
        SphereInfo((50.0, 40.8, WALL_RADIUS), WALL_RADIUS, material=neutral),
        # Bottom, y = 0
        SphereInfo((50.0, WALL_RADIUS, 81.6), WALL_RADIUS, material=neutral),
        # Top, y = 81.6
        SphereInfo((50.0, -WALL_RADIUS + 81.6, 81.6), WALL_RADIUS, material=neutral),
        # Balls resting on the floor
        SphereInfo((27.0, 16.5, 47.0), BALL_RADIUS, material=Material.diffuse(DIFFUSE_BALL_COLOR)),
        SphereInfo((73.0, 16.5, 78.0), BALL_RADIUS, material=Material.specular(MIRROR_BALL_COLOR)),
        # Light
        SphereInfo(
            LIGHT_CENTER,
            LIGHT_RADIUS,
            emission=params.light_emission,
            material=Material.diffuse((0.0, 0.0, 0.0)),
        ),
    ]


def create_box_scene(params: BoxSceneParams | None = None) -> tuple[Scene, PinholeCamera]:
    """Create the box scene and its camera.

    Args:
        params: Optional BoxSceneParams for customizing the light emission
            and wall colours. If None, uses default BoxSceneParams().

    Returns:
        A tuple of (Scene, PinholeCamera). The scene's light index is
        LIGHT_INDEX.

    Raises:
        SceneConfigurationError: If params make the scene invalid (for
            example a light emission of zero).
        ValueError: If a wall colour is outside [0, 1].

    Example:
        >>> scene, camera = create_box_scene()
        >>> scene.num_spheres
        8
    """
    scene = Scene(create_box_spheres(params), light_index=LIGHT_INDEX)
    camera = PinholeCamera(origin=CAMERA_ORIGIN, direction=CAMERA_DIRECTION)
    return scene, camera
