"""Unit tests for ray-sphere intersection.

Tests cover:
- Ray hitting a sphere from outside
- Ray missing a sphere (negative discriminant)
- Ray starting inside a sphere (far root)
- Sphere entirely behind the ray
- Self-intersection epsilon
- Outward normals
"""

import pytest
import taichi as ti


def _intersect(origin, direction, center, radius):
    """Run intersect_sphere for one ray inside a kernel."""
    from src.pathtracer.core.ray import Ray, normalize, vec3
    from src.pathtracer.geometry.sphere import intersect_sphere

    result = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        cx: ti.f64, cy: ti.f64, cz: ti.f64,
        r: ti.f64,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=normalize(vec3(dx, dy, dz)))
        result[None] = intersect_sphere(ray, vec3(cx, cy, cz), r)

    test_kernel(*origin, *direction, *center, radius)
    return result[None]


class TestSphereRoots:
    """Tests for the raw quadratic solution."""

    def test_roots_of_centered_sphere(self):
        """Test both roots for a ray through the sphere center."""
        from src.pathtracer.core.ray import Ray, vec3
        from src.pathtracer.geometry.sphere import sphere_roots

        hit = ti.field(dtype=ti.i32, shape=())
        roots = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 5.0), direction=vec3(0.0, 0.0, -1.0))
            h, t_near, t_far = sphere_roots(ray, vec3(0.0, 0.0, 0.0), 1.0)
            hit[None] = h
            roots[0] = t_near
            roots[1] = t_far

        test_kernel()
        assert hit[None] == 1
        assert abs(roots[0] - 4.0) < 1e-12
        assert abs(roots[1] - 6.0) < 1e-12

    def test_negative_discriminant(self):
        """Test that a clear miss reports no roots."""
        from src.pathtracer.core.ray import Ray, vec3
        from src.pathtracer.geometry.sphere import sphere_roots

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(5.0, 0.0, 5.0), direction=vec3(0.0, 0.0, -1.0))
            h, _, _ = sphere_roots(ray, vec3(0.0, 0.0, 0.0), 1.0)
            hit[None] = h

        test_kernel()
        assert hit[None] == 0


class TestIntersectSphere:
    """Tests for intersect_sphere."""

    def test_hit_from_outside(self):
        """Test a head-on hit from outside returns the near distance."""
        t = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert abs(t - 4.0) < 1e-12

    def test_miss(self):
        """Test that a ray passing beside the sphere misses."""
        from src.pathtracer.geometry.sphere import NO_HIT

        t = _intersect((2.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert t == NO_HIT

    def test_hit_from_inside(self):
        """Test that a ray from the center hits the far root at distance r."""
        t = _intersect((0.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 0.0, 0.0), 2.5)
        assert abs(t - 2.5) < 1e-12

    def test_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        from src.pathtracer.geometry.sphere import NO_HIT

        t = _intersect((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert t == NO_HIT

    def test_origin_on_surface_skips_self(self):
        """Test that a ray leaving the surface outward does not hit its own sphere."""
        from src.pathtracer.geometry.sphere import NO_HIT

        t = _intersect((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert t == NO_HIT

    def test_origin_on_surface_inward_hits_far_side(self):
        """Test that a ray entering from the surface hits the opposite side."""
        t = _intersect((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert abs(t - 2.0) < 1e-9

    def test_large_wall_sphere(self):
        """Test precision against a 1e5-radius wall sphere."""
        t = _intersect((50.0, 40.0, 80.0), (-1.0, 0.0, 0.0), (1e5 + 1.0, 40.8, 81.6), 1e5)
        # The origin is inside the wall sphere; its surface near x = 1 is ~49 away
        assert t == pytest.approx(49.0, abs=1e-3)


class TestSphereNormal:
    """Tests for sphere_normal."""

    def test_outward_normal(self):
        """Test that the normal points away from the center with unit length."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.geometry.sphere import sphere_normal

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = sphere_normal(vec3(1.0, 1.0, 1.0), vec3(1.0, 3.0, 1.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-12
        assert abs(n[1] - 1.0) < 1e-12
        assert abs(n[2]) < 1e-12
