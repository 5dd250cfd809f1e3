"""
boundary.py — Wall, Corner and Obstacle Conditions
==================================================
Applied after every relaxation sweep and after every advection pass.

Modes (the `b` argument everywhere in the solver):
  0 → scalars (density, pressure, divergence): edges copy the interior
      neighbour (zero-gradient / Neumann)
  1 → Vx: left/right walls NEGATE the interior neighbour (no flow through
      vertical walls), top/bottom copy
  2 → Vy: top/bottom walls negate, left/right copy

Corners take the mean of their two edge neighbours.
Obstacle cells (obstacles[i] == 1) are forced to exactly 0 last, so an
obstacle on the border or in a corner also reads 0.
"""

import numpy as np
from numba import njit

MODE_SCALAR = 0
MODE_VX = 1
MODE_VY = 2


@njit(cache=True)
def set_bnd(b: int, x: np.ndarray, obstacles: np.ndarray, n: int) -> None:
    # Vertical walls (left / right)
    for j in range(1, n - 1):
        row = j * n
        if b == 1:
            x[row] = -x[row + 1]
            x[row + n - 1] = -x[row + n - 2]
        else:
            x[row] = x[row + 1]
            x[row + n - 1] = x[row + n - 2]

    # Horizontal walls (top / bottom)
    last = (n - 1) * n
    for i in range(1, n - 1):
        if b == 2:
            x[i] = -x[i + n]
            x[i + last] = -x[i + last - n]
        else:
            x[i] = x[i + n]
            x[i + last] = x[i + last - n]

    # Corners
    x[0] = 0.5 * (x[1] + x[n])
    x[last] = 0.5 * (x[last + 1] + x[last - n])
    x[n - 1] = 0.5 * (x[n - 2] + x[2 * n - 1])
    x[last + n - 1] = 0.5 * (x[last + n - 2] + x[last - 1])

    # Internal solids
    for idx in range(n * n):
        if obstacles[idx] == 1:
            x[idx] = 0.0
