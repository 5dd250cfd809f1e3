"""
sampling.py — Bilinear Sampling on the Flattened Grid
=====================================================
Every field is a flat row-major array: cell (i, j) lives at i + j*N.

Bilinear interpolation = linear interp in X, then Y.
Think of it as a weighted average of the 4 cells around (x, y).

The sample point is clamped to [0.5, N-1.5] on both axes so the 2×2
footprint (x0, x0+1) × (y0, y0+1) never leaves the array.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def bilinear(field: np.ndarray, x: float, y: float, n: int) -> float:
    """
    Sample a flat (n*n) field at fractional grid coordinates.

    Args:
        field : flat float32 array of length n*n
        x, y  : fractional column / row (clamped, never raises)
        n     : grid side length

    Returns:
        Interpolated value as a float
    """
    hi = n - 1.5
    # NaN fails every comparison, so `not >=` sends it to the low clamp
    if not x >= 0.5:
        x = 0.5
    if x > hi:
        x = hi
    if not y >= 0.5:
        y = 0.5
    if y > hi:
        y = hi

    # x, y >= 0.5 here, so int() is floor
    i0 = int(x)
    i1 = i0 + 1
    j0 = int(y)
    j1 = j0 + 1

    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1

    return (s0 * (t0 * field[i0 + j0 * n] + t1 * field[i0 + j1 * n]) +
            s1 * (t0 * field[i1 + j0 * n] + t1 * field[i1 + j1 * n]))
