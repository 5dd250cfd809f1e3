"""
advect.py — Semi-Lagrangian Advection
=====================================
This is what makes fluid look like it's *actually flowing*.

The algorithm (per interior cell):
  1. Look at the current cell center (i, j).
  2. Trace BACKWARD along the velocity field by dt·(N-2) grid units.
     → "Where did the stuff in this cell come FROM?"
  3. Clamp that point into [0.5, N-1.5] and sample the SOURCE field there
     with bilinear interpolation (it'll land between grid cells).
  4. That sampled value becomes the new value for this cell.

Unconditionally stable for any dt; the price is numerical diffusion
from the interpolation.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np
from numba import njit

from .boundary import MODE_SCALAR, MODE_VX, MODE_VY, set_bnd
from .grid import FluidGrid
from .sampling import bilinear


@njit(cache=True)
def advect(b: int, d: np.ndarray, d0: np.ndarray, vx: np.ndarray, vy: np.ndarray,
           dt: float, obstacles: np.ndarray, n: int) -> None:
    """
    Move field d0 along (vx, vy) into d.

    Args:
        b      : boundary mode for d (0 scalar, 1 vx, 2 vy)
        d      : destination field (overwritten on the interior)
        d0     : source field, must not alias d
        vx, vy : velocity to trace with
        dt     : timestep
    """
    dt0 = dt * (n - 2)  # scale dt to grid units
    for j in range(1, n - 1):
        for i in range(1, n - 1):
            idx = i + j * n
            x = i - dt0 * vx[idx]
            y = j - dt0 * vy[idx]
            d[idx] = bilinear(d0, x, y, n)
    set_bnd(b, d, obstacles, n)


def advect_velocity(grid: FluidGrid, dt: float):
    """
    Self-advection of velocity.

    Expects the caller to have swapped velocity first: both components
    are traced along the PREVIOUS field (vx_prev, vy_prev) so vx's update
    does not leak into vy's backtrace.

    Modifies: grid.vx, grid.vy (in-place)
    """
    n = grid.N
    dt = float(dt)
    advect(MODE_VX, grid.vx, grid.vx_prev, grid.vx_prev, grid.vy_prev, dt, grid.obstacles, n)
    advect(MODE_VY, grid.vy, grid.vy_prev, grid.vx_prev, grid.vy_prev, dt, grid.obstacles, n)


def advect_density(grid: FluidGrid, dt: float):
    """
    Carry dye from density_prev along the current (projected) velocity.

    Modifies: grid.density (in-place)
    """
    advect(MODE_SCALAR, grid.density, grid.density_prev, grid.vx, grid.vy,
           float(dt), grid.obstacles, grid.N)
