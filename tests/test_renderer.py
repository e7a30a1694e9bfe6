"""Tests for shading and the reference rendering loop.

Tests cover:
- Direct shading of a single hit
- First-light default versus summing all lights
- Scenes without lights or objects
- End-to-end render of a lit sphere through an orthographic grid
- Render settings validation
"""

import numpy as np
import pytest


def _sphere_hit_scene(material, lights):
    """Sphere at (0, 0, 10) hit head-on at (0, 0, 9) by a ray from the origin."""
    from lumen.core.ray import Ray, vec3
    from lumen.scene.manager import Scene

    scene = Scene.empty()
    scene.add_sphere((0.0, 0.0, 10.0), 1.0, material)
    for position, color in lights:
        scene.add_light(position, color)
    ray = Ray.new_normalize(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 1.0))
    return scene, ray


class TestShade:
    """Tests for direct shading."""

    def test_light_behind_viewer(self, red_material):
        """Test full color when the light faces the surface head-on."""
        from lumen.core.color import WHITE, Rgb
        from lumen.core.renderer import trace_ray

        scene, ray = _sphere_hit_scene(red_material, [((0.0, 0.0, 0.0), WHITE)])
        color = trace_ray(scene, ray)
        assert abs(color.red - 1.0) < 1e-12
        assert color.green == 0.0
        assert color.blue == 0.0
        assert color.to_rgb8() == Rgb(1.0, 0.0, 0.0).to_rgb8()

    def test_grazing_light(self, red_material):
        """Test that a light in the tangent plane gives black."""
        from lumen.core.color import WHITE
        from lumen.core.renderer import trace_ray

        scene, ray = _sphere_hit_scene(red_material, [((5.0, 0.0, 9.0), WHITE)])
        assert trace_ray(scene, ray).to_rgb8() == (0, 0, 0)

    def test_light_color_modulates(self, red_material):
        """Test that the light color multiplies the BSDF."""
        from lumen.core.color import Rgb
        from lumen.core.renderer import trace_ray

        scene, ray = _sphere_hit_scene(red_material, [((0.0, 0.0, 0.0), Rgb(0.5, 1.0, 1.0))])
        assert abs(trace_ray(scene, ray).red - 0.5) < 1e-12

    def test_first_light_only_by_default(self, red_material):
        """Test that only the first light contributes unless asked."""
        from lumen.core.color import WHITE, Rgb
        from lumen.core.renderer import trace_ray
        from lumen.materials.lambertian import Lambert
        from lumen.materials.material import UniformMaterial

        white = UniformMaterial(Lambert(1.0, 1.0, 1.0))
        lights = [((0.0, 0.0, 0.0), Rgb(0.25, 0.0, 0.0)), ((0.0, 0.0, 0.0), WHITE)]
        scene, ray = _sphere_hit_scene(white, lights)

        first = trace_ray(scene, ray)
        assert abs(first.red - 0.25) < 1e-12
        assert abs(first.green) < 1e-12

        summed = trace_ray(scene, ray, all_lights=True)
        assert abs(summed.red - 1.25) < 1e-12
        assert abs(summed.green - 1.0) < 1e-12

    def test_material_receives_hit_geometry(self):
        """Test that the material is queried with the hit point and its normal."""
        from lumen.core.color import WHITE
        from lumen.core.renderer import trace_ray
        from lumen.materials.lambertian import Lambert
        from lumen.materials.material import Material

        class RecordingMaterial(Material):
            def __init__(self):
                self.queries = []

            def get_bsdf(self, geom):
                self.queries.append(geom)
                return Lambert(1.0, 1.0, 1.0)

        material = RecordingMaterial()
        scene, ray = _sphere_hit_scene(material, [((0.0, 0.0, 0.0), WHITE)])
        color = trace_ray(scene, ray)

        assert abs(color.green - 1.0) < 1e-12
        assert len(material.queries) == 1
        geom = material.queries[0]
        assert np.allclose(geom.position, [0.0, 0.0, 9.0], atol=1e-12)
        assert np.allclose(geom.normal, scene.objects[0].shape.normal(geom.position))

    def test_no_lights_is_black(self, red_material):
        """Test that hits in an unlit scene are black."""
        from lumen.core.color import BLACK
        from lumen.core.renderer import trace_ray

        scene, ray = _sphere_hit_scene(red_material, [])
        assert trace_ray(scene, ray) == BLACK

    def test_miss_is_black(self, red_material):
        """Test that a ray missing everything is black."""
        from lumen.core.color import BLACK, WHITE
        from lumen.core.ray import Ray, vec3
        from lumen.core.renderer import trace_ray

        scene, _ = _sphere_hit_scene(red_material, [((0.0, 0.0, 0.0), WHITE)])
        ray = Ray.new_normalize(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
        assert trace_ray(scene, ray) == BLACK

    def test_zero_radius_sphere_is_black(self, red_material):
        """Test that a degenerate normal shades black instead of failing."""
        from lumen.core.color import BLACK, WHITE
        from lumen.core.renderer import shade

        scene, ray = _sphere_hit_scene(red_material, [((0.0, 0.0, 0.0), WHITE)])
        renderable = scene.objects[0]
        renderable.shape.radius = 0.0
        assert shade(scene, ray, renderable, 10.0) == BLACK


class TestRenderer:
    """Tests for the reference rendering loop."""

    def test_sphere_disc(self, grid_camera, sphere_scene):
        """Test that the lit sphere covers exactly the disc of radius 25."""
        from lumen.core.renderer import RenderSettings, Renderer

        image = Renderer(RenderSettings(width=100, height=100)).render(grid_camera, sphere_scene)
        assert image.shape == (100, 100, 3)
        assert image.dtype == np.uint8

        for y in range(100):
            for x in range(100):
                d2 = (x - 50) ** 2 + (y - 50) ** 2
                r, g, b = image[y, x]
                assert g == 0 and b == 0
                if d2 <= 600:
                    assert r > 0, (x, y)
                elif d2 >= 627:
                    assert r == 0, (x, y)

    def test_center_pixel_brightest(self, grid_camera, sphere_scene):
        """Test that the sphere is brightest facing the light."""
        from lumen.core.renderer import Renderer

        image = Renderer().render(grid_camera, sphere_scene)
        assert image[50, 50, 0] == image[..., 0].max()
        assert image[50, 50, 0] > image[50, 30, 0]

    def test_empty_scene_all_black(self, grid_camera):
        """Test that an empty scene renders black."""
        from lumen.core.renderer import RenderSettings, Renderer
        from lumen.scene.manager import Scene

        image = Renderer(RenderSettings(width=8, height=6)).render(grid_camera, Scene.empty())
        assert image.shape == (6, 8, 3)
        assert not image.any()

    def test_unlit_scene_warns(self, grid_camera, red_material, caplog):
        """Test the warning for a scene with objects but no lights."""
        from lumen.core.renderer import RenderSettings, Renderer
        from lumen.scene.manager import Scene

        scene = Scene.empty()
        scene.add_sphere((2.0, 2.0, 10.0), 1.0, red_material)
        with caplog.at_level("WARNING", logger="lumen.core.renderer"):
            image = Renderer(RenderSettings(width=4, height=4)).render(grid_camera, scene)
        assert "no lights" in caplog.text
        assert not image.any()

    def test_render_pixel_matches_image(self, grid_camera, sphere_scene):
        """Test that render_pixel agrees with the full render."""
        from lumen.core.renderer import Renderer, render_pixel

        image = Renderer().render(grid_camera, sphere_scene)
        for x, y in [(50, 50), (40, 60), (10, 10)]:
            assert render_pixel(grid_camera, sphere_scene, x, y, 100, 100) == tuple(image[y, x])


class TestRenderSettings:
    """Tests for settings validation."""

    def test_defaults(self):
        """Test the default 100x100 python render."""
        from lumen.core.renderer import RenderSettings

        settings = RenderSettings()
        assert (settings.width, settings.height) == (100, 100)
        assert settings.backend == "python"
        assert settings.all_lights is False

    @pytest.mark.parametrize(("width", "height"), [(0, 10), (10, 0), (-1, 5)])
    def test_invalid_size(self, width, height):
        """Test that dimensions must be positive."""
        from lumen.core.renderer import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(width=width, height=height)

    def test_invalid_backend(self):
        """Test that unknown backends are rejected."""
        from lumen.core.renderer import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(backend="opencl")

    def test_settings_are_frozen(self):
        """Test that settings cannot change after a renderer holds them."""
        import dataclasses

        from lumen.core.renderer import RenderSettings, Renderer

        renderer = Renderer(RenderSettings(width=20, height=20))
        with pytest.raises(dataclasses.FrozenInstanceError):
            renderer.settings.width = 10
        assert renderer.width == 20


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
