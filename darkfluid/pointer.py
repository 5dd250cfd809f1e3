"""
pointer.py — Pointer / Touch Input → Grid Forces
================================================
Maps screen pixels onto the grid and turns a drag into dye + velocity.

A drag from (x0, y0) to (x1, y1) in grid units injects
  velocity = (x1 - x0, y1 - y0) · force_scale
at the new position, splatted over `radius` cells.
"""

import numpy as np

from .forces import splat
from .grid import FluidGrid


class PointerInjector:
    """
    Usage:
        pointer = PointerInjector(grid, width=800, height=800)
        pointer.press(px, py)     # mouse down
        pointer.move(px, py)      # mouse drag, once per event
        pointer.release()         # mouse up
    """

    def __init__(self, grid: FluidGrid, width: float, height: float,
                 density_amount: float = 100.0, force_scale: float = 5.0,
                 radius: int = 2):
        """
        Args:
            grid           : Grid receiving the injection
            width, height  : Screen / canvas size in pixels
            density_amount : Dye added at the pointer per drag event
            force_scale    : Grid-space pointer delta → velocity factor
            radius         : Splat radius in cells
        """
        self.grid = grid
        self.width = width
        self.height = height
        self.density_amount = density_amount
        self.force_scale = force_scale
        self.radius = radius
        self.last = None   # last grid position while pressed

    def to_grid(self, px: float, py: float) -> tuple:
        """
        Screen pixel → grid coordinates, clamped to the interior [1, N-2].
        NaN pixels map to the top-left edge of the interior.
        """
        n = self.grid.N
        px, py = np.nan_to_num(px), np.nan_to_num(py)
        gx = float(np.interp(px, [0, self.width], [1, n - 2]))
        gy = float(np.interp(py, [0, self.height], [1, n - 2]))
        return gx, gy

    @property
    def pressed(self) -> bool:
        return self.last is not None

    def press(self, px: float, py: float):
        gx, gy = self.to_grid(px, py)
        self.last = (gx, gy)
        splat(self.grid, gx, gy, self.density_amount, radius=self.radius)

    def move(self, px: float, py: float):
        if self.last is None:
            return
        gx, gy = self.to_grid(px, py)
        dx = (gx - self.last[0]) * self.force_scale
        dy = (gy - self.last[1]) * self.force_scale
        splat(self.grid, gx, gy, self.density_amount, dx, dy, radius=self.radius)
        self.last = (gx, gy)

    def release(self):
        self.last = None
