"""
forces.py — External Forces (Buoyancy, Dissipation, Pointer Splats)
===================================================================
Body forces and sinks applied around the core solve.

Buoyancy treats dye density as a proxy for heat:
  Vy -= density * buoyancy * dt
Y grows DOWNWARD on screen, so subtracting makes dense fluid rise for
positive buoyancy and sink for negative buoyancy.

Dissipation is a per-step exponential decay. Nothing else in the system
removes mass or energy, so without it a held pointer fills the box.
"""

import numpy as np

from .grid import FluidGrid


def apply_buoyancy(grid: FluidGrid, buoyancy: float, dt: float):
    """
    Push vertical velocity by local density (cells with density > 0 only).

    Modifies: grid.vy (in-place)
    """
    if buoyancy == 0.0:
        return
    mask = grid.density > 0
    grid.vy[mask] -= grid.density[mask] * np.float32(buoyancy * dt)


def dissipate(array: np.ndarray, rate: float):
    """Multiply every cell by `rate` in place (1.0 = no decay)."""
    array *= np.float32(rate)


def splat(grid: FluidGrid, x: float, y: float, amount: float,
          dx: float = 0.0, dy: float = 0.0, radius: int = 2):
    """
    Inject dye and a velocity impulse around (x, y) (e.g. a pointer drag).
    Strength falls off linearly with distance from the center cell.

    Goes through grid.add_density / grid.add_velocity, so every cell is
    clamped into the grid and capped like a single-cell injection.

    Args:
        x, y   : Center of the splat (grid coordinates)
        amount : Dye to add at the center
        dx, dy : Velocity impulse at the center
        radius : Influence radius in cells (0 = single cell)
    """
    center = grid.ix(x, y)
    cx, cy = center % grid.N, center // grid.N
    r = max(0, int(radius))
    for oy in range(-r, r + 1):
        for ox in range(-r, r + 1):
            dist = (ox * ox + oy * oy) ** 0.5
            if dist > r:
                continue
            weight = 1.0 - dist / (r + 1)
            if amount:
                grid.add_density(cx + ox, cy + oy, amount * weight)
            if dx or dy:
                grid.add_velocity(cx + ox, cy + oy, dx * weight, dy * weight)
