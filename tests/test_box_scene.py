"""Unit tests for the box scene.

Tests cover:
- Scene creation and sphere count
- Wall, ball and light placement
- Materials and emission
- Camera configuration
- Parameter overrides
"""

import numpy as np
import pytest


class TestSceneCreation:
    """Tests for basic scene creation."""

    def test_create_scene_returns_tuple(self, box_scene):
        """Test that create_box_scene returns a scene and a camera."""
        from src.pathtracer.camera.pinhole import PinholeCamera
        from src.pathtracer.scene.scene import Scene

        scene, camera = box_scene
        assert isinstance(scene, Scene)
        assert isinstance(camera, PinholeCamera)

    def test_sphere_count(self, box_scene):
        """Test that the scene has 5 walls, 2 balls and a light."""
        scene, _ = box_scene
        assert scene.num_spheres == 8

    def test_light_index(self, box_scene):
        """Test that the light is the last sphere."""
        from src.pathtracer.scene.box import LIGHT_INDEX

        scene, _ = box_scene
        assert scene.light_index == LIGHT_INDEX == 7
        assert scene.light.center == (50.0, 70.0, 81.6)
        assert scene.light.radius == 5.0
        assert scene.light.emission == (50.0, 50.0, 50.0)

    def test_only_light_emits(self, box_scene):
        """Test that every other sphere has zero emission."""
        scene, _ = box_scene
        emissive = [i for i, s in enumerate(scene.spheres) if s.is_emissive]
        assert emissive == [7]


class TestGeometry:
    """Tests for sphere placement."""

    @pytest.mark.parametrize(
        "index, center, color",
        [
            (0, (1e5 + 1.0, 40.8, 81.6), (0.75, 0.25, 0.25)),
            (1, (-1e5 + 99.0, 40.8, 81.6), (0.25, 0.25, 0.75)),
            (2, (50.0, 40.8, 1e5), (0.75, 0.75, 0.75)),
            (3, (50.0, 1e5, 81.6), (0.75, 0.75, 0.75)),
            (4, (50.0, -1e5 + 81.6, 81.6), (0.75, 0.75, 0.75)),
        ],
    )
    def test_walls(self, box_scene, index, center, color):
        """Test wall centers, radii and colours."""
        from src.pathtracer.materials import MaterialKind

        scene, _ = box_scene
        wall = scene.spheres[index]
        assert wall.radius == 1e5
        np.testing.assert_allclose(wall.center, center)
        assert wall.material.kind == MaterialKind.DIFFUSE
        assert wall.material.reflectance == color

    def test_balls(self, box_scene):
        """Test the diffuse and mirror balls."""
        from src.pathtracer.materials import MaterialKind

        scene, _ = box_scene
        diffuse, mirror = scene.spheres[5], scene.spheres[6]

        assert diffuse.center == (27.0, 16.5, 47.0)
        assert diffuse.radius == 16.5
        assert diffuse.material.kind == MaterialKind.DIFFUSE
        assert diffuse.material.reflectance == (0.9, 0.9, 0.9)

        assert mirror.center == (73.0, 16.5, 78.0)
        assert mirror.radius == 16.5
        assert mirror.material.kind == MaterialKind.SPECULAR
        assert mirror.material.reflectance == (0.999, 0.999, 0.999)

    def test_balls_rest_on_floor(self, box_scene):
        """Test that both balls touch the floor at y = 0."""
        scene, _ = box_scene
        for ball in scene.spheres[5:7]:
            assert ball.center[1] - ball.radius == pytest.approx(0.0)

    def test_light_material_is_black(self, box_scene):
        """Test that the light reflects nothing."""
        scene, _ = box_scene
        assert scene.light.material.reflectance == (0.0, 0.0, 0.0)


class TestCamera:
    """Tests for the camera configuration."""

    def test_camera(self, box_scene):
        """Test camera origin and direction."""
        _, camera = box_scene
        assert camera.origin == (50.0, 52.0, 295.6)
        assert camera.direction == (0.0, -0.042612, -1.0)
        assert camera.viewport_height == 0.5135


class TestParams:
    """Tests for BoxSceneParams."""

    def test_defaults(self):
        """Test the default parameters."""
        from src.pathtracer.scene.box import BoxSceneParams

        params = BoxSceneParams()
        assert params.light_emission == (50.0, 50.0, 50.0)
        assert params.left_wall_color == (0.75, 0.25, 0.25)
        assert params.right_wall_color == (0.25, 0.25, 0.75)

    def test_custom_params(self):
        """Test overriding the light and wall colours."""
        from src.pathtracer.scene.box import BoxSceneParams, create_box_scene

        params = BoxSceneParams(light_emission=(10.0, 8.0, 6.0), left_wall_color=(0.1, 0.8, 0.1))
        scene, _ = create_box_scene(params)
        assert scene.light.emission == (10.0, 8.0, 6.0)
        assert scene.spheres[0].material.reflectance == (0.1, 0.8, 0.1)
        np.testing.assert_allclose(scene.emissions.to_numpy()[7], [10.0, 8.0, 6.0])

    def test_dark_light_rejected(self):
        """Test that a light without emission is rejected."""
        from src.pathtracer.scene.box import BoxSceneParams, create_box_scene
        from src.pathtracer.scene.scene import SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            create_box_scene(BoxSceneParams(light_emission=(0.0, 0.0, 0.0)))

    def test_invalid_wall_color(self):
        """Test that a wall reflectance above one is rejected."""
        from src.pathtracer.scene.box import BoxSceneParams, create_box_scene

        with pytest.raises(ValueError):
            create_box_scene(BoxSceneParams(right_wall_color=(1.2, 0.2, 0.2)))
