"""
grid.py — Collocated Square Grid
================================
The foundation of the entire simulation.

Every field is a FLAT row-major float32 array of N*N cells:
  cell (i, j)  →  index i + j*N     (i = column, j = row)

All quantities (density, velocity, pressure) live at cell centers.
Row 0 / row N-1 and column 0 / column N-1 are the wall layer the
boundary conditions write into; cells 1..N-2 are the fluid interior.

Current / previous pairs are swapped by reference every timestep
(ping-pong buffering); nothing is copied and nothing is reallocated
until `reset()` is asked for a new size.
"""

import logging

import numpy as np

from .sampling import bilinear

logger = logging.getLogger(__name__)

# Injection cap keeps a held pointer from saturating the image
MAX_DENSITY = 255.0

# Fields that make up the simulation state (scratch fields excluded)
STATE_FIELDS = ("density", "vx", "vy", "pressure", "obstacles")


class FluidGrid:
    """
    N×N grid storing all simulation state.
    This is the single source of truth handed to the solver and renderer.
    """

    def __init__(self, N: int = 128):
        """
        Args:
            N : Grid side length in cells (N=128 → 16,384 cells).
                Must be at least 3 so one interior cell exists.
        """
        if N < 3:
            raise ValueError(f"Grid size must be at least 3, got {N}")
        self._allocate(N)

    def _allocate(self, N: int):
        self.N = N
        self.count = N * N

        # ── Scalar fields ──────────────────────────────────────────────────
        self.density      = np.zeros(self.count, dtype=np.float32)
        self.density_prev = np.zeros(self.count, dtype=np.float32)

        # ── Velocity fields ────────────────────────────────────────────────
        self.vx      = np.zeros(self.count, dtype=np.float32)
        self.vx_prev = np.zeros(self.count, dtype=np.float32)
        self.vy      = np.zeros(self.count, dtype=np.float32)
        self.vy_prev = np.zeros(self.count, dtype=np.float32)

        # ── Solver scratch (recomputed every projection) ───────────────────
        self.divergence    = np.zeros(self.count, dtype=np.float32)
        self.pressure      = np.zeros(self.count, dtype=np.float32)
        self.pressure_prev = np.zeros(self.count, dtype=np.float32)

        # ── Solids: 0 = fluid, 1 = obstacle ────────────────────────────────
        self.obstacles = np.zeros(self.count, dtype=np.uint8)

    @property
    def size(self) -> int:
        return self.N

    def ix(self, x: float, y: float) -> int:
        """
        Flat index of cell (x, y), clamping (not wrapping) into [0, N-1].
        Fractional coordinates are truncated after the clamp; NaN maps to 0.
        """
        last = self.N - 1
        if not x >= 0:
            x = 0
        if not y >= 0:
            y = 0
        x = min(x, last)
        y = min(y, last)
        return int(x) + int(y) * self.N

    def add_density(self, x: float, y: float, amount: float):
        """Inject dye at (x, y); the cell is capped at MAX_DENSITY."""
        idx = self.ix(x, y)
        self.density[idx] += amount
        if self.density[idx] > MAX_DENSITY:
            self.density[idx] = MAX_DENSITY

    def add_velocity(self, x: float, y: float, dx: float, dy: float):
        """Apply a velocity impulse at (x, y). Magnitude is not limited."""
        idx = self.ix(x, y)
        self.vx[idx] += dx
        self.vy[idx] += dy

    def add_obstacle(self, x0: int, y0: int, x1: int, y1: int):
        """Mark the inclusive cell rectangle (x0, y0)–(x1, y1) as solid."""
        obs = self.as_2d(self.obstacles)
        last = self.N - 1
        xa, xb = sorted((min(max(x0, 0), last), min(max(x1, 0), last)))
        ya, yb = sorted((min(max(y0, 0), last), min(max(y1, 0), last)))
        obs[ya:yb + 1, xa:xb + 1] = 1

    def swap(self, field: str):
        """
        Exchange current and previous buffers by reference.

        'velocity' swaps BOTH components together; diffusion and
        advection treat (vx, vy) as one step.
        'pressure' is accepted and deliberately does nothing.
        """
        if field == "density":
            self.density, self.density_prev = self.density_prev, self.density
        elif field == "velocity":
            self.vx, self.vx_prev = self.vx_prev, self.vx
            self.vy, self.vy_prev = self.vy_prev, self.vy
        elif field == "pressure":
            pass
        else:
            raise ValueError(f"Unknown field: {field}. Use 'density', 'velocity' or 'pressure'.")

    def get_interpolated_value(self, array: np.ndarray, x: float, y: float) -> float:
        """Bilinear sample of `array` at fractional (x, y), clamped to [0.5, N-1.5]."""
        return float(bilinear(array, float(x), float(y), self.N))

    def reset(self, width: int = None, height: int = None) -> bool:
        """
        Zero every field, obstacles included.

        With a size, every buffer is reallocated to width*height first.
        The grid is square: width != height is logged and ignored.

        Returns True if the grid was reset.
        """
        if width is None and height is None:
            for arr in (self.density, self.density_prev,
                        self.vx, self.vx_prev, self.vy, self.vy_prev,
                        self.divergence, self.pressure, self.pressure_prev,
                        self.obstacles):
                arr.fill(0)
            return True

        if height is None:
            height = width
        if width is None:
            width = height
        if width != height or width < 3:
            logger.error("Cannot reset grid to %sx%s: grid must be square and at least 3x3",
                         width, height)
            return False

        self._allocate(int(width))
        logger.debug("Grid reallocated to %dx%d", width, height)
        return True

    def get_total_density(self) -> float:
        """Sum of all density cells (mass-conservation diagnostic)."""
        return float(self.density.sum(dtype=np.float64))

    def as_2d(self, array: np.ndarray) -> np.ndarray:
        """(N, N) view of a flat field, indexed [row, column]."""
        return array.reshape(self.N, self.N)

    def compute_divergence(self) -> np.ndarray:
        """
        Centered-difference divergence of (vx, vy), in physical units (h = 1/N).
        div(v) = du/dx + dv/dy

        For an incompressible fluid this should be ~0 in the interior.
        The border row/column is left at zero.

        Returns: (N, N) float32 array.
        """
        N = self.N
        u = self.as_2d(self.vx)
        v = self.as_2d(self.vy)
        div = np.zeros((N, N), dtype=np.float32)
        div[1:-1, 1:-1] = 0.5 * N * (
            (u[1:-1, 2:] - u[1:-1, :-2]) +
            (v[2:, 1:-1] - v[:-2, 1:-1])
        )
        return div

    def mean_abs_divergence(self) -> float:
        """Mean |div v| over interior cells."""
        return float(np.abs(self.compute_divergence()[1:-1, 1:-1]).mean())

    def save_state(self) -> dict:
        """
        Snapshot the persistent fields as (N, N) copies.

        Returns a dict with 'density', 'vx', 'vy', 'pressure', 'obstacles'.
        """
        return {name: self.as_2d(getattr(self, name)).copy() for name in STATE_FIELDS}

    def load_state(self, state: dict) -> bool:
        """
        Restore fields from a `save_state()`-style dict.

        Arrays may be flat or (N, N). If any array has the wrong number of
        cells the whole load is skipped, logged, and the grid is untouched.
        Missing keys leave that field as it is.

        Returns True if the state was applied.
        """
        arrays = {}
        for name in STATE_FIELDS:
            if name not in state:
                continue
            arr = np.asarray(state[name])
            if arr.size != self.count:
                logger.error("Dimension mismatch loading '%s': got %d cells, grid has %d (%dx%d)",
                             name, arr.size, self.count, self.N, self.N)
                return False
            arrays[name] = arr.reshape(self.count)

        for name, arr in arrays.items():
            target = getattr(self, name)
            target[:] = arr.astype(target.dtype, copy=False)
        return True

    def __repr__(self):
        return (
            f"FluidGrid(N={self.N})\n"
            f"  density   : max={self.density.max():.4f}, sum={self.get_total_density():.2f}\n"
            f"  velocity  : max_vx={np.abs(self.vx).max():.4f}, max_vy={np.abs(self.vy).max():.4f}\n"
            f"  divergence: mean={self.mean_abs_divergence():.6f} (target: ~0)"
        )
