"""Unit tests for the scene container.

Tests cover:
- Validation of sphere data and the light index
- Upload of sphere data into Taichi fields
- Nearest-hit queries (closest sphere, misses, overlapping spheres)
"""

import math

import numpy as np
import pytest
import taichi as ti


def _light(center=(0.0, 10.0, 0.0), radius=1.0, emission=(5.0, 5.0, 5.0)):
    from src.pathtracer.materials import Material
    from src.pathtracer.scene.scene import SphereInfo

    return SphereInfo(center, radius, emission=emission, material=Material.diffuse((0.0, 0.0, 0.0)))


def _ball(center, radius=1.0, reflectance=(0.5, 0.5, 0.5)):
    from src.pathtracer.materials import Material
    from src.pathtracer.scene.scene import SphereInfo

    return SphereInfo(center, radius, material=Material.diffuse(reflectance))


def _nearest(scene, origin, direction):
    from src.pathtracer.core.ray import make_ray, normalize, vec3

    index = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        s: ti.template(),
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
    ):
        i, t = s.nearest_hit(make_ray(vec3(ox, oy, oz), normalize(vec3(dx, dy, dz))))
        index[None] = i
        distance[None] = t

    test_kernel(scene, *origin, *direction)
    return index[None], distance[None]


class TestSceneValidation:
    """Tests for scene invariants."""

    def test_valid_scene(self):
        """Test constructing a small valid scene."""
        from src.pathtracer.scene.scene import Scene

        scene = Scene([_ball((0.0, 0.0, 0.0)), _light()], light_index=1)
        assert scene.num_spheres == 2
        assert scene.light_index == 1
        assert scene.light.is_emissive

    def test_empty_scene(self):
        """Test that a scene without spheres is rejected."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([], light_index=0)

    @pytest.mark.parametrize("light_index", [-1, 2, 5])
    def test_light_index_out_of_range(self, light_index):
        """Test that an invalid light index is rejected."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([_ball((0.0, 0.0, 0.0)), _light()], light_index=light_index)

    def test_light_without_emission(self):
        """Test that the light must emit."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([_ball((0.0, 0.0, 0.0)), _light()], light_index=0)

    def test_second_emitter(self):
        """Test that only the light sphere may emit."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([_light((5.0, 0.0, 0.0)), _light()], light_index=1)

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_radius(self, radius):
        """Test that non-positive and non-finite radii are rejected."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([_ball((0.0, 0.0, 0.0), radius=radius), _light()], light_index=1)

    def test_negative_emission(self):
        """Test that negative emission is rejected."""
        from src.pathtracer.scene.scene import Scene, SceneConfigurationError

        with pytest.raises(SceneConfigurationError):
            Scene([_light(emission=(1.0, -1.0, 1.0))], light_index=0)

    @pytest.mark.parametrize("component", [math.nan, math.inf])
    def test_non_finite_reflectance(self, component):
        """Test that a sphere cannot be built with non-finite reflectance."""
        from src.pathtracer.materials import Material
        from src.pathtracer.scene.scene import Scene, SphereInfo

        with pytest.raises(ValueError):
            mirror = SphereInfo((0.0, 0.0, 0.0), 1.0, material=Material.specular((component, 0.5, 0.5)))
            Scene([mirror, _light()], light_index=1)

    def test_configuration_error_is_value_error(self):
        """Test that SceneConfigurationError can be caught as ValueError."""
        from src.pathtracer.scene.scene import SceneConfigurationError

        assert issubclass(SceneConfigurationError, ValueError)


class TestSceneFields:
    """Tests for the uploaded Taichi fields."""

    def test_fields_match_spheres(self):
        """Test that centers, radii, emission and materials are uploaded in order."""
        from src.pathtracer.materials import Material, MaterialKind
        from src.pathtracer.scene.scene import Scene, SphereInfo

        mirror = SphereInfo((3.0, 0.0, 0.0), 2.0, material=Material.specular((0.9, 0.9, 0.9)))
        scene = Scene([_ball((0.0, 1.0, 2.0), reflectance=(0.1, 0.2, 0.3)), mirror, _light()], light_index=2)

        np.testing.assert_allclose(scene.centers.to_numpy(), [[0, 1, 2], [3, 0, 0], [0, 10, 0]])
        np.testing.assert_allclose(scene.radii.to_numpy(), [1.0, 2.0, 1.0])
        np.testing.assert_allclose(scene.emissions.to_numpy()[2], [5.0, 5.0, 5.0])
        assert np.all(scene.emissions.to_numpy()[:2] == 0.0)
        assert scene.material_kinds.to_numpy().tolist() == [
            int(MaterialKind.DIFFUSE),
            int(MaterialKind.SPECULAR),
            int(MaterialKind.DIFFUSE),
        ]
        np.testing.assert_allclose(scene.reflectances.to_numpy()[0], [0.1, 0.2, 0.3])


class TestNearestHit:
    """Tests for Scene.nearest_hit."""

    def test_closest_of_two(self):
        """Test that the closer of two spheres along the ray is returned."""
        from src.pathtracer.scene.scene import Scene

        scene = Scene([_ball((0.0, 0.0, -10.0)), _ball((0.0, 0.0, -5.0)), _light()], light_index=2)
        index, t = _nearest(scene, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == 1
        assert abs(t - 4.0) < 1e-12

    def test_miss(self):
        """Test that a ray missing everything reports -1 and T_MAX."""
        from src.pathtracer.scene.scene import T_MAX, Scene

        scene = Scene([_ball((0.0, 0.0, -10.0)), _light()], light_index=1)
        index, t = _nearest(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert index == -1
        assert t == T_MAX

    def test_light_is_hit(self):
        """Test that the light sphere is an ordinary intersectable sphere."""
        from src.pathtracer.scene.scene import Scene

        scene = Scene([_ball((0.0, 0.0, -10.0)), _light()], light_index=1)
        index, t = _nearest(scene, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert index == 1
        assert abs(t - 9.0) < 1e-12

    def test_from_inside_enclosing_sphere(self):
        """Test a ray starting inside a large sphere that contains a smaller one."""
        from src.pathtracer.scene.scene import Scene

        scene = Scene([_ball((0.0, 0.0, 0.0), radius=100.0), _light((0.0, 0.0, -20.0))], light_index=1)
        index, t = _nearest(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert index == 0
        assert abs(t - 100.0) < 1e-9
        index, t = _nearest(scene, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == 1
        assert abs(t - 19.0) < 1e-9
