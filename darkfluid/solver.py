"""
solver.py — Master Physics Loop
===============================
The complete simulation step that ties everything together.
One call to `step(dt)` advances the fluid by dt.

Physics pipeline per frame (order is load-bearing):
  1. Buoyancy (skipped when the force is 0)
  2. Diffuse velocity (viscosity)
  3. Project velocity (enforce incompressibility)
  4. Advect velocity (self-advection)
  5. Project again (clean up after advection)
  6. Diffuse density (dye spreading)
  7. Advect density (dye movement)
  8. Dissipate density and velocity

This follows "Stable Fluids" by Jos Stam.
"""

import logging
import time
from collections import deque

import numpy as np

from .advect import advect_density, advect_velocity
from .config import FluidConfig
from .diffuse import diffuse_density, diffuse_velocity
from .forces import apply_buoyancy, dissipate
from .grid import FluidGrid
from .projection import project

logger = logging.getLogger(__name__)

PERF_LOG_SIZE = 1000   # most recent frames kept in perf_log


class FluidSolver:
    """
    Advances one FluidGrid in place. Owns no field storage.

    Usage:
        grid = FluidGrid(N=128)
        solver = FluidSolver(grid, FluidConfig.from_preset("default_void"))
        for frame in range(100):
            grid.add_density(64, 120, 50.0)
            grid.add_velocity(64, 120, 0.0, -5.0)
            solver.step(0.1)
            density = grid.density   # hand to renderer
    """

    def __init__(self, grid: FluidGrid, config: FluidConfig = None,
                 perf_log_size: int = PERF_LOG_SIZE):
        """
        Args:
            grid   : The grid to advance. Read by size every step, so a
                     grid resized through grid.reset(w, h) keeps working.
            config : Solver parameters (defaults to FluidConfig()).
                     `iter` is copied out of it and may be changed live.
            perf_log_size : Metrics of this many recent steps are kept.
        """
        self.grid = grid
        self.config = config if config is not None else FluidConfig()
        self.iter = self.config.iterations
        self.frame = 0
        self.perf_log = deque(maxlen=perf_log_size)   # timing data of recent frames

    def step(self, dt: float) -> dict:
        """
        Advance simulation by one timestep.

        Returns performance metrics dict for benchmarking.
        """
        t_total_start = time.perf_counter()
        g = self.grid
        cfg = self.config
        iterations = int(self.iter)

        # ── Step 1: Buoyancy ───────────────────────────────────────────────
        t0 = time.perf_counter()
        apply_buoyancy(g, cfg.buoyancy, dt)
        t_forces = (time.perf_counter() - t0) * 1000

        # ── Step 2: Diffuse velocity (viscosity) ───────────────────────────
        t0 = time.perf_counter()
        g.swap("velocity")
        diffuse_velocity(g, cfg.viscosity, dt, iterations)
        t_diffuse_vel = (time.perf_counter() - t0) * 1000

        # ── Step 3: Project velocity ───────────────────────────────────────
        t0 = time.perf_counter()
        project(g, iterations)
        t_project1 = (time.perf_counter() - t0) * 1000

        # ── Step 4: Advect velocity (self-advection) ───────────────────────
        t0 = time.perf_counter()
        g.swap("velocity")
        advect_velocity(g, dt)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        # ── Step 5: Project again (clean up post-advection divergence) ─────
        t0 = time.perf_counter()
        proj_metrics = project(g, iterations)
        t_project2 = (time.perf_counter() - t0) * 1000

        # ── Step 6: Diffuse density ────────────────────────────────────────
        t0 = time.perf_counter()
        g.swap("density")
        diffuse_density(g, cfg.diffusion, dt, iterations)
        t_diffuse_den = (time.perf_counter() - t0) * 1000

        # ── Step 7: Advect density ─────────────────────────────────────────
        t0 = time.perf_counter()
        g.swap("density")
        advect_density(g, dt)
        t_advect_den = (time.perf_counter() - t0) * 1000

        # ── Step 8: Dissipation ────────────────────────────────────────────
        t0 = time.perf_counter()
        dissipate(g.density, cfg.dissipation)
        dissipate(g.vx, cfg.velocity_dissipation)
        dissipate(g.vy, cfg.velocity_dissipation)
        t_dissipate = (time.perf_counter() - t0) * 1000

        finite = self.check_finite() if cfg.check_finite else True

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"            : self.frame,
            "total_ms"         : t_total,
            "fps"              : 1000.0 / t_total if t_total > 0 else 0,
            "forces_ms"        : t_forces,
            "diffuse_vel_ms"   : t_diffuse_vel,
            "project1_ms"      : t_project1,
            "advect_vel_ms"    : t_advect_vel,
            "project2_ms"      : t_project2,
            "diffuse_den_ms"   : t_diffuse_den,
            "advect_den_ms"    : t_advect_den,
            "dissipate_ms"     : t_dissipate,
            "divergence_mean"  : proj_metrics["divergence_after_mean"],
            "density_total"    : g.get_total_density(),
            "finite"           : finite,
        }
        self.perf_log.append(metrics)
        return metrics

    def check_finite(self) -> bool:
        """
        True if density, vx and vy hold only finite values.

        A blow-up is logged as a warning and left in place; the caller
        decides whether to reset. The interactive loop must keep running.
        """
        g = self.grid
        bad = [name for name in ("density", "vx", "vy")
               if not np.isfinite(getattr(g, name)).all()]
        if bad:
            logger.warning("Non-finite values in %s after frame %d; "
                           "check viscosity/diffusion/dt (iter=%s)",
                           ", ".join(bad), self.frame + 1, self.iter)
            return False
        return True

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  N={g.N}  |  iter={self.iter}")
        print(f"  Density   : max={g.density.max():.4f}, total={g.get_total_density():.2f}")
        print(f"  Velocity  : max_vx={np.abs(g.vx).max():.4f}, max_vy={np.abs(g.vy).max():.4f}")
        print(f"  Divergence: mean={g.mean_abs_divergence():.8f}")
        print(f"  Pressure  : max={g.pressure.max():.4f}, min={g.pressure.min():.4f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
