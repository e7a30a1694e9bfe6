"""Unit tests for the Lambertian BSDF and materials."""

import math

import pytest
import taichi as ti


class TestLambert:
    """Tests for Lambert.bsdf in reflection space."""

    def test_light_along_normal(self):
        """Test full color when the light is straight above."""
        from lumen.core.color import Rgb
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        result = Lambert(1.0, 0.5, 0.25).bsdf(vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 3.0))
        assert result == Rgb(1.0, 0.5, 0.25)

    def test_cosine_falloff(self):
        """Test that the color scales with the cosine to the normal."""
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        light = vec3(math.sin(math.pi / 3.0), 0.0, math.cos(math.pi / 3.0))
        result = Lambert(1.0, 1.0, 1.0).bsdf(vec3(0.0, 0.0, 1.0), light * 10.0)
        assert abs(result.red - 0.5) < 1e-12
        assert abs(result.blue - 0.5) < 1e-12

    def test_grazing_light_is_black(self):
        """Test that light in the tangent plane gives no color."""
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        result = Lambert(1.0, 0.0, 0.0).bsdf(vec3(0.0, 0.0, 1.0), vec3(1.0, 0.0, 0.0))
        assert abs(result.red) < 1e-12

    def test_light_below_surface_is_negative(self):
        """Test that the cosine is not clamped."""
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        result = Lambert(1.0, 0.0, 0.0).bsdf(vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, -1.0))
        assert result.red < 0.0
        assert result.to_rgb8() == (0, 0, 0)

    def test_view_is_ignored(self):
        """Test that the view direction does not change the result."""
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        bsdf = Lambert(0.2, 0.4, 0.6)
        light = vec3(0.3, 0.4, 0.8)
        assert bsdf.bsdf(vec3(0.0, 0.0, 1.0), light) == bsdf.bsdf(vec3(5.0, -1.0, 0.1), light)

    def test_zero_light_is_black(self):
        """Test that a light at the surface point contributes nothing."""
        from lumen.core.color import BLACK
        from lumen.core.ray import vec3
        from lumen.materials.lambertian import Lambert

        assert Lambert(1.0, 1.0, 1.0).bsdf(vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, 0.0)) == BLACK


class TestUniformMaterial:
    """Tests for the constant material wrapper."""

    def test_same_bsdf_everywhere(self):
        """Test that every surface point gets the wrapped BSDF."""
        from lumen.core.ray import vec3
        from lumen.geometry.shape import DiffGeom
        from lumen.materials.lambertian import Lambert
        from lumen.materials.material import UniformMaterial

        bsdf = Lambert(1.0, 0.0, 0.0)
        material = UniformMaterial(bsdf)
        geom_a = DiffGeom(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0))
        geom_b = DiffGeom(vec3(9.0, 9.0, 9.0), vec3(1.0, 0.0, 0.0))
        assert material.get_bsdf(geom_a) is bsdf
        assert material.get_bsdf(geom_b) is bsdf


class TestLambertKernel:
    """Tests for the eval_lambert kernel twin."""

    def test_kernel_matches_python(self):
        """Test that eval_lambert agrees with Lambert.bsdf."""
        from lumen.core.ray import ti_vec3, vec3
        from lumen.materials.lambertian import Lambert, eval_lambert

        lights = [(0.0, 0.0, 2.0), (0.3, 0.4, 0.8), (1.0, 0.0, -1.0), (0.0, 0.0, 0.0)]
        n = len(lights)
        light_field = ti.Vector.field(3, dtype=ti.f64, shape=n)
        result = ti.Vector.field(3, dtype=ti.f64, shape=n)
        for i, light in enumerate(lights):
            light_field[i] = light

        @ti.kernel
        def test_kernel():
            for i in range(n):
                result[i] = eval_lambert(ti_vec3(0.2, 0.4, 0.6), light_field[i])

        test_kernel()
        bsdf = Lambert(0.2, 0.4, 0.6)
        for i, light in enumerate(lights):
            expected = bsdf.bsdf(vec3(0.0, 0.0, 1.0), vec3(*light)).to_array()
            got = result[i]
            for c in range(3):
                assert abs(got[c] - expected[c]) < 1e-12


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
