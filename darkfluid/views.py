"""
views.py — Turning Grid Fields into Images
==========================================
Read-only consumers of FluidGrid. Nothing here touches solver state.

ViewMode picks WHICH field becomes an image:
  DENSITY  → dye concentration
  VELOCITY → |v| per cell
  PRESSURE → last projection's pressure

Each built-in preset (see config.PRESETS) has a matching entry in
PALETTES; Palette.from_preset(name) builds it.

For the density view the cinematic look is:
  1. Tone map: d < 0.1 → 0, else (d·0.005·contrast)^0.9 · 255, capped at 255
  2. Blend base → accent for the lower half, accent → secondary above
  3. Scale by brightness
  4. Bloom: blurred copy added back on top (glow)
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
from matplotlib.colors import LinearSegmentedColormap

from .grid import FluidGrid


class ViewMode(Enum):
    DENSITY = "density"
    VELOCITY = "velocity"
    PRESSURE = "pressure"

    @classmethod
    def parse(cls, name: str) -> "ViewMode":
        try:
            return cls(name.lower())
        except ValueError:
            raise ValueError(f"Unknown view mode: {name}. "
                             f"Use one of {[m.value for m in cls]}.") from None

    def next(self) -> "ViewMode":
        modes = list(ViewMode)
        return modes[(modes.index(self) + 1) % len(modes)]


@dataclass
class Palette:
    base: tuple = (10, 10, 20)
    accent: tuple = (0, 255, 200)
    secondary: tuple = (160, 30, 255)
    contrast: float = 1.2
    brightness: float = 1.1
    glow: float = 1.0

    @classmethod
    def from_preset(cls, name: str) -> "Palette":
        """Palette of a built-in preset. Raises ValueError for an unknown name."""
        if name not in PALETTES:
            raise ValueError(f"Unknown preset: {name}. Use one of {sorted(PALETTES)}.")
        return cls(**PALETTES[name])


PALETTES = {
    "default_void": {
        "base"      : (10, 10, 20),
        "accent"    : (0, 255, 200),
        "secondary" : (160, 30, 255),
        "contrast"  : 1.2,
        "brightness": 1.1,
        "glow"      : 1.0,
    },
    "thick_oil": {
        "base"      : (0, 0, 0),
        "accent"    : (50, 50, 50),
        "secondary" : (100, 80, 40),
        "contrast"  : 1.5,
        "brightness": 1.0,
        "glow"      : 0.5,
    },
    "cosmic_wind": {
        "base"      : (20, 0, 40),
        "accent"    : (255, 0, 200),
        "secondary" : (0, 200, 255),
        "contrast"  : 1.1,
        "brightness": 1.3,
        "glow"      : 2.0,
    },
}


def field_image(grid: FluidGrid, mode: ViewMode = ViewMode.DENSITY) -> np.ndarray:
    """(N, N) float32 image of the field selected by `mode`, indexed [row, column]."""
    if mode is ViewMode.DENSITY:
        return grid.as_2d(grid.density).copy()
    if mode is ViewMode.VELOCITY:
        return np.hypot(grid.as_2d(grid.vx), grid.as_2d(grid.vy)).astype(np.float32)
    if mode is ViewMode.PRESSURE:
        return grid.as_2d(grid.pressure).copy()
    raise ValueError(f"Unknown view mode: {mode}")


def tone_map(density: np.ndarray, contrast: float = 1.2) -> np.ndarray:
    """Map raw density to 0..255 intensity with a soft contrast curve."""
    d = np.asarray(density, dtype=np.float64)
    out = np.zeros_like(d)
    lit = d >= 0.1
    out[lit] = np.power(d[lit] * 0.005 * contrast, 0.9) * 255.0
    return np.minimum(out, 255.0)


def density_to_rgb(density: np.ndarray, palette: Palette = None) -> np.ndarray:
    """
    Color a 2D density image.

    Returns: (H, W, 3) uint8 RGB.
    """
    palette = palette or Palette()
    t = (tone_map(density, palette.contrast) / 255.0)[..., np.newaxis]

    base = np.asarray(palette.base, dtype=np.float64)
    accent = np.asarray(palette.accent, dtype=np.float64)
    secondary = np.asarray(palette.secondary, dtype=np.float64)

    low = np.clip(t * 2.0, 0.0, 1.0)            # base → accent
    high = np.clip((t - 0.5) * 2.0, 0.0, 1.0)   # accent → secondary
    rgb = np.where(t < 0.5,
                   (1 - low) * base + low * accent,
                   (1 - high) * accent + high * secondary)
    rgb = np.clip(rgb * palette.brightness, 0, 255).astype(np.uint8)

    if palette.glow > 0:
        rgb = apply_bloom(rgb, palette.glow)
    return rgb


def _box_blur(img: np.ndarray, radius: int, axis: int) -> np.ndarray:
    # Edge cells average only the taps that exist
    total = np.zeros_like(img)
    hits = np.zeros(img.shape[axis], dtype=np.float64)
    n = img.shape[axis]
    for offset in range(-radius, radius + 1):
        lo, hi = max(0, -offset), min(n, n - offset)
        dst = [slice(None)] * img.ndim
        src = [slice(None)] * img.ndim
        dst[axis] = slice(lo, hi)
        src[axis] = slice(lo + offset, hi + offset)
        total[tuple(dst)] += img[tuple(src)]
        hits[lo:hi] += 1
    shape = [1] * img.ndim
    shape[axis] = n
    return total / hits.reshape(shape)


def apply_bloom(rgb: np.ndarray, intensity: float, radius: int = 1) -> np.ndarray:
    """
    Glow: separable box blur (horizontal then vertical) added back on top.

    Returns: uint8 image of the same shape.
    """
    src = rgb.astype(np.float64)
    # Each pass truncates to whole intensity levels
    blur = np.floor(_box_blur(src, radius, axis=1))
    blur = np.floor(_box_blur(blur, radius, axis=0))
    return np.clip(src + blur * intensity, 0, 255).astype(np.uint8)


def palette_colormap(palette: Palette = None) -> LinearSegmentedColormap:
    """Matplotlib colormap running base → accent → secondary."""
    palette = palette or Palette()
    colors = [tuple(c / 255.0 for c in color)
              for color in (palette.base, palette.accent, palette.secondary)]
    return LinearSegmentedColormap.from_list("darkfluid", colors)
