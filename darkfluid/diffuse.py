"""
diffuse.py — Implicit Diffusion via Gauss-Seidel Relaxation
===========================================================
Diffusion makes fluids spread out over time.
  - High diffusion  → dye spreads fast (watercolor bleed)
  - Low diffusion   → dye stays tight (laser-focused smoke column)
  - High viscosity  → thick fluid (oil)
  - Low viscosity   → thin fluid (air, smoke)

The math: solve the implicit heat equation
  (I - a·∇²) x = x0,   a = dt * rate * (N-2)²

One relaxation step per interior cell:
  x[i,j] = (x0[i,j] + a * (x[i-1,j] + x[i+1,j] + x[i,j-1] + x[i,j+1])) / (1 + 4a)

The denominator is 1 + 4a, one term per neighbour of the 2D stencil. The
3D constant 1 + 6a would not solve the equation above and drains dye on
every solve.

Gauss-Seidel updates IN PLACE, so a cell already sees this sweep's values
for its left and upper neighbours. That read-after-write dependency is
why the sweep is a compiled loop instead of a numpy slice (a sliced
update would be Jacobi, which converges differently).
"""

import numpy as np
from numba import njit

from .boundary import MODE_SCALAR, MODE_VX, MODE_VY, set_bnd
from .grid import FluidGrid


@njit(cache=True)
def lin_solve(b: int, x: np.ndarray, x0: np.ndarray, a: float, c: float,
              iterations: int, obstacles: np.ndarray, n: int) -> None:
    """
    Gauss-Seidel solver for x = (x0 + a * sum_of_4_neighbours(x)) / c.
    Boundary conditions are re-applied after every sweep.
    """
    c_recip = 1.0 / c
    for _ in range(iterations):
        for j in range(1, n - 1):
            for i in range(1, n - 1):
                idx = i + j * n
                x[idx] = (x0[idx] + a * (
                    x[idx - 1] +
                    x[idx + 1] +
                    x[idx - n] +
                    x[idx + n]
                )) * c_recip
        set_bnd(b, x, obstacles, n)


@njit(cache=True)
def diffuse(b: int, x: np.ndarray, x0: np.ndarray, rate: float, dt: float,
            iterations: int, obstacles: np.ndarray, n: int) -> None:
    a = dt * rate * (n - 2) * (n - 2)
    lin_solve(b, x, x0, a, 1.0 + 4.0 * a, iterations, obstacles, n)


def diffuse_velocity(grid: FluidGrid, viscosity: float, dt: float, iterations: int):
    """
    Viscous diffusion of both velocity components.

    Expects the caller to have swapped velocity first: vx_prev / vy_prev
    are the source, vx / vy the destination.

    Modifies: grid.vx, grid.vy (in-place)
    """
    n = grid.N
    diffuse(MODE_VX, grid.vx, grid.vx_prev, float(viscosity), float(dt), int(iterations), grid.obstacles, n)
    diffuse(MODE_VY, grid.vy, grid.vy_prev, float(viscosity), float(dt), int(iterations), grid.obstacles, n)


def diffuse_density(grid: FluidGrid, diffusion: float, dt: float, iterations: int):
    """
    Diffuse the dye field from density_prev into density.

    No early return on diffusion == 0: with a = 0 the solve copies
    density_prev into density, which the swapped pipeline relies on.

    Modifies: grid.density (in-place)
    """
    diffuse(MODE_SCALAR, grid.density, grid.density_prev, float(diffusion), float(dt),
            int(iterations), grid.obstacles, grid.N)
