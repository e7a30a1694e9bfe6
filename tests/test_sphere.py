"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Sphere behind the ray
- Negative radius clamping
- Kernel twin agreement
"""

import numpy as np
import pytest
import taichi as ti


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        from lumen.core.ray import Ray, vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(0.0, 0.0, 0.0), 1.0)
        ray = Ray.new_normalize(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0))
        t = sphere.intersection(ray)
        assert t is not None
        assert abs(t - 4.0) < 1e-12

    def test_miss(self):
        """Test ray passing beside the sphere."""
        from lumen.core.ray import Ray, vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(0.0, 0.0, 0.0), 1.0)
        ray = Ray.new_normalize(vec3(2.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0))
        assert sphere.intersection(ray) is None

    def test_inside_returns_far_root(self):
        """Test that a ray starting inside hits the far side."""
        from lumen.core.ray import Ray, vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(0.0, 0.0, 0.0), 2.0)
        ray = Ray.new_normalize(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0))
        t = sphere.intersection(ray)
        assert t is not None
        assert abs(t - 2.0) < 1e-12

    def test_sphere_behind_ray(self):
        """Test that spheres entirely behind the origin are missed."""
        from lumen.core.ray import Ray, vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(0.0, 0.0, -10.0), 1.0)
        ray = Ray.new_normalize(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0))
        assert sphere.intersection(ray) is None

    def test_unnormalized_direction(self):
        """Test that t is measured in units of the direction vector."""
        from lumen.core.ray import Ray, vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(0.0, 0.0, 10.0), 1.0)
        ray = Ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 3.0))
        t = sphere.intersection(ray)
        assert t is not None
        assert abs(t - 3.0) < 1e-12

    def test_negative_radius_clamped(self, caplog):
        """Test that a negative radius becomes zero with a warning."""
        from lumen.core.ray import vec3
        from lumen.geometry.sphere import Sphere

        with caplog.at_level("WARNING", logger="lumen.geometry.sphere"):
            sphere = Sphere(vec3(1.0, 2.0, 3.0), -4.0)
        assert sphere.radius == 0.0
        assert "negative" in caplog.text

    def test_normal_points_outward(self):
        """Test that the normal points from the center to the point."""
        from lumen.core.ray import vec3
        from lumen.geometry.sphere import Sphere

        sphere = Sphere(vec3(1.0, 0.0, 0.0), 2.0)
        assert np.allclose(sphere.normal(vec3(1.0, 2.0, 0.0)), [0.0, 2.0, 0.0])

    def test_random_rays_agree_with_closest_point(self):
        """Test that rays through the sphere hit it and others miss.

        A ray from outside hits exactly when the closest point on the ray
        lies strictly inside the sphere; the hit point lies on the surface.
        """
        from lumen.core.ray import Ray, length
        from lumen.geometry.sphere import Sphere

        rng = np.random.default_rng(42)
        for _ in range(200):
            sphere = Sphere(rng.uniform(-5, 5, 3), rng.uniform(0.5, 3.0))
            origin = sphere.center + rng.normal(size=3) * 20.0
            if length(origin - sphere.center) <= sphere.radius + 1e-3:
                continue
            ray = Ray.new_normalize(origin, rng.uniform(-1, 1, 3))
            gap = length(ray.closest_point(sphere.center) - sphere.center)
            t = sphere.intersection(ray)

            if gap < sphere.radius - 1e-6:
                assert t is not None
                assert abs(length(ray.at_time(t) - sphere.center) - sphere.radius) < 1e-6
            elif gap > sphere.radius + 1e-6:
                assert t is None


class TestSphereKernel:
    """Tests for the hit_sphere kernel twin."""

    def test_kernel_matches_python(self):
        """Test that hit_sphere agrees with Sphere.intersection."""
        from lumen.core.ray import Ray, ti_vec3, vec3
        from lumen.geometry.shape import NO_HIT
        from lumen.geometry.sphere import Sphere, hit_sphere

        cases = [
            (vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0)),  # hit from outside
            (vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0)),  # inside
            (vec3(2.0, 0.0, 5.0), vec3(0.0, 0.0, -1.0)),  # miss
            (vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, 1.0)),  # behind
        ]
        n = len(cases)
        origins = ti.Vector.field(3, dtype=ti.f64, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f64, shape=n)
        t_val = ti.field(dtype=ti.f64, shape=n)
        for i, (origin, direction) in enumerate(cases):
            origins[i] = origin.tolist()
            directions[i] = direction.tolist()

        @ti.kernel
        def test_kernel():
            for i in range(n):
                t_val[i] = hit_sphere(
                    origins[i], directions[i], ti_vec3(0.0, 0.0, 0.0), 1.0
                )

        test_kernel()
        sphere = Sphere(vec3(0.0, 0.0, 0.0), 1.0)
        for i, (origin, direction) in enumerate(cases):
            expected = sphere.intersection(Ray(origin, direction))
            if expected is None:
                assert t_val[i] == NO_HIT
            else:
                assert abs(t_val[i] - expected) < 1e-9


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
