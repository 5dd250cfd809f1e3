import numpy as np
import pytest

from darkfluid import PRESETS, Palette, ViewMode
from darkfluid.views import apply_bloom, density_to_rgb, field_image, palette_colormap, tone_map


def test_view_mode_parse_and_cycle():
    assert ViewMode.parse("Velocity") is ViewMode.VELOCITY
    assert ViewMode.DENSITY.next() is ViewMode.VELOCITY
    assert ViewMode.PRESSURE.next() is ViewMode.DENSITY
    with pytest.raises(ValueError):
        ViewMode.parse("vorticity")


def test_field_images_have_grid_shape(grid):
    grid.add_density(3, 4, 9.0)
    grid.add_velocity(5, 6, 3.0, 4.0)
    grid.pressure[grid.ix(1, 2)] = -2.0

    density = field_image(grid, ViewMode.DENSITY)
    speed = field_image(grid, ViewMode.VELOCITY)
    pressure = field_image(grid, ViewMode.PRESSURE)

    for img in (density, speed, pressure):
        assert img.shape == (16, 16)
    assert density[4, 3] == pytest.approx(9.0)
    assert speed[6, 5] == pytest.approx(5.0)
    assert pressure[2, 1] == pytest.approx(-2.0)


def test_field_image_is_a_copy(grid):
    img = field_image(grid, ViewMode.DENSITY)
    img[:] = 1.0
    assert not grid.density.any()


def test_tone_map_threshold_and_cap():
    out = tone_map(np.array([0.05, 100.0, 1e6]), contrast=1.0)
    assert out[0] == 0.0
    assert out[1] == pytest.approx((0.5 ** 0.9) * 255.0)
    assert out[2] == 255.0


def test_density_to_rgb_endpoints():
    palette = Palette(glow=0.0, brightness=1.0)
    rgb = density_to_rgb(np.array([[0.0, 1e6]]), palette)
    assert rgb.shape == (1, 2, 3) and rgb.dtype == np.uint8
    assert tuple(rgb[0, 0]) == palette.base
    assert tuple(rgb[0, 1]) == palette.secondary


def test_bloom_brightens_neighbours():
    img = np.zeros((5, 5, 3), dtype=np.uint8)
    img[2, 2] = 180
    out = apply_bloom(img, intensity=1.0)
    assert out[2, 2, 0] == 200          # 180 + floor(180 / 9)
    assert out[2, 1, 0] == 20
    assert out[1, 1, 0] == 20
    assert out[0, 0, 0] == 0


def test_bloom_clamps():
    img = np.full((3, 3, 3), 200, dtype=np.uint8)
    assert (apply_bloom(img, intensity=2.0) == 255).all()


def test_palette_colormap_endpoints():
    palette = Palette()
    cmap = palette_colormap(palette)
    assert np.allclose(cmap(0.0)[:3], np.array(palette.base) / 255.0)
    assert np.allclose(cmap(1.0)[:3], np.array(palette.secondary) / 255.0)


def test_bloom_truncates_each_pass():
    img = np.zeros((5, 5, 3), dtype=np.uint8)
    img[1, 2] = 5
    img[2, 2] = 5
    out = apply_bloom(img, intensity=1.0)
    # horizontal pass leaves floor(5 / 3) = 1, vertical floor(2 / 3) = 0
    assert out[2, 2, 0] == 5
    assert out[1, 2, 0] == 5


def test_every_preset_has_a_palette():
    for name in PRESETS:
        assert isinstance(Palette.from_preset(name), Palette)
    oil = Palette.from_preset("thick_oil")
    assert oil.accent == (50, 50, 50)
    assert oil.glow == 0.5
    assert Palette.from_preset("default_void") == Palette()
    with pytest.raises(ValueError):
        Palette.from_preset("neon")
