"""
darkfluid/ — Cinematic 2D Stable Fluids
=======================================
Exports the main interfaces the app layers use.

Renderer imports: FluidGrid (read-only), ViewMode, Palette
Input imports:    PointerInjector
Driver imports:   FluidSolver → step(dt), FluidConfig, PRESETS
"""

from .config import PRESETS, FluidConfig
from .grid import FluidGrid
from .pointer import PointerInjector
from .solver import FluidSolver
from .views import Palette, ViewMode

__all__ = ["FluidGrid", "FluidSolver", "FluidConfig", "PRESETS",
           "PointerInjector", "Palette", "ViewMode"]
