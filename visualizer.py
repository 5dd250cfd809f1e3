"""
visualizer.py — Live Fluid Window
=================================
Renders the grid with matplotlib and feeds mouse drags back in.

Controls:
  drag (left button) → inject dye + velocity
  v                  → cycle view (density → velocity → pressure)
  r                  → reset the grid
  + / -              → more / fewer solver iterations

Uses matplotlib FuncAnimation for real-time updates.
"""

import logging

import matplotlib.animation as animation
import matplotlib.pyplot as plt
import numpy as np

from darkfluid import Palette, PointerInjector, ViewMode
from darkfluid.views import density_to_rgb, field_image, palette_colormap

logger = logging.getLogger(__name__)


class FluidVisualizer:
    """
    Real-time viewer of one solver's grid.

    Usage (standalone):
        from darkfluid import FluidGrid, FluidSolver
        from visualizer import FluidVisualizer

        grid = FluidGrid(N=128)
        viz = FluidVisualizer(FluidSolver(grid))
        viz.run()  # Opens live window
    """

    def __init__(self, solver, dt: float = 0.1, palette: Palette = None,
                 mode: ViewMode = ViewMode.DENSITY, window_px: int = 720):
        self.solver = solver
        self.grid = solver.grid
        self.dt = dt
        self.palette = palette or Palette()
        self.mode = mode
        self.pointer = PointerInjector(self.grid, window_px, window_px)

        self._setup_figure(window_px)

    def _setup_figure(self, window_px: int):
        """Initialize the matplotlib figure with one borderless axes."""
        dpi = 100
        self.fig = plt.figure(figsize=(window_px / dpi, window_px / dpi), dpi=dpi)
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        self.ax.set_axis_off()

        N = self.grid.N
        self.img = self.ax.imshow(
            np.zeros((N, N, 3), dtype=np.uint8),
            interpolation='bilinear',
            origin='upper',
            extent=(0, window_px, window_px, 0),
        )
        self.cmap = palette_colormap(self.palette)
        self.status = self.ax.text(
            8, 16, "", color='#cccccc', fontsize=9, fontfamily='monospace'
        )

        self.fig.canvas.mpl_connect('button_press_event', self._on_press)
        self.fig.canvas.mpl_connect('motion_notify_event', self._on_move)
        self.fig.canvas.mpl_connect('button_release_event', self._on_release)
        self.fig.canvas.mpl_connect('key_press_event', self._on_key)

    # ── Input ─────────────────────────────────────────────────────────────
    def _on_press(self, event):
        if event.inaxes is self.ax and event.xdata is not None:
            self.pointer.press(event.xdata, event.ydata)

    def _on_move(self, event):
        if event.inaxes is self.ax and event.xdata is not None:
            self.pointer.move(event.xdata, event.ydata)

    def _on_release(self, event):
        self.pointer.release()

    def _on_key(self, event):
        if event.key == 'v':
            self.mode = self.mode.next()
        elif event.key == 'r':
            self.grid.reset()
        elif event.key == '+':
            self.solver.iter += 5
        elif event.key == '-':
            self.solver.iter = max(1, self.solver.iter - 5)

    # ── Drawing ───────────────────────────────────────────────────────────
    def frame_rgb(self) -> np.ndarray:
        """RGB image of the current view mode."""
        if self.mode is ViewMode.DENSITY:
            return density_to_rgb(field_image(self.grid, self.mode), self.palette)
        data = field_image(self.grid, self.mode)
        span = float(np.abs(data).max()) or 1.0
        if self.mode is ViewMode.PRESSURE:
            norm = 0.5 + 0.5 * data / span
        else:
            norm = data / span
        return (self.cmap(norm)[..., :3] * 255).astype(np.uint8)

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates the image."""
        metrics = self.solver.step(self.dt)
        self.img.set_data(self.frame_rgb())
        self.status.set_text(
            f"{self.mode.value} | frame {metrics['frame']} | iter={self.solver.iter} | "
            f"{metrics['fps']:.1f} FPS"
        )
        return [self.img, self.status]

    def run(self, fps: int = 30, frames: int = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = until the window closes)
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=True,
            cache_frame_data=False,
        )
        plt.show()

    def save_gif(self, path: str = "darkfluid.gif", fps: int = 20, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        logger.info("Rendering %d frames to %s", frames, path)
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=1000 // fps, blit=True
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        logger.info("Saved: %s", path)
