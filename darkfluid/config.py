"""
config.py — Solver Configuration and Built-in Presets
=====================================================
Everything the solver reads per step, held in one explicit object.
No module-level globals: pass a FluidConfig to FluidSolver.

Presets are tuned looks:
  default_void → thin, fast-fading smoke
  thick_oil    → viscous, slow, sinking
  cosmic_wind  → wide-spreading, rising, cheap solve
"""

import logging
from dataclasses import asdict, dataclass, fields

logger = logging.getLogger(__name__)


@dataclass
class FluidConfig:
    viscosity: float = 1e-5             # velocity diffusion (0 = inviscid)
    diffusion: float = 1e-4             # dye spreading rate
    dissipation: float = 0.995          # per-step dye decay (1.0 = none)
    velocity_dissipation: float = 0.99  # per-step velocity decay
    buoyancy: float = 0.0               # >0 dense dye rises, <0 sinks
    iterations: int = 20                # Gauss-Seidel sweeps per solve
    check_finite: bool = True           # warn on NaN/inf after each step

    @classmethod
    def from_dict(cls, values: dict) -> "FluidConfig":
        """Build a config from a plain mapping; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            if key not in known:
                logger.debug("Ignoring unknown config key %r", key)
                continue
            default = getattr(cls, key)
            if isinstance(default, bool):
                kwargs[key] = bool(value)
            elif isinstance(default, int):
                kwargs[key] = int(value)
            else:
                kwargs[key] = float(value)
        return cls(**kwargs)

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "FluidConfig":
        """
        Config for a built-in preset, with optional field overrides.

        Raises ValueError for an unknown preset name.
        """
        if name not in PRESETS:
            raise ValueError(f"Unknown preset: {name}. Use one of {sorted(PRESETS)}.")
        values = dict(PRESETS[name])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)

    def to_dict(self) -> dict:
        return asdict(self)


PRESETS = {
    "default_void": {
        "diffusion"   : 0.0001,
        "viscosity"   : 0.00001,
        "dissipation" : 0.995,
        "buoyancy"    : 0.0,
        "iterations"  : 20,
    },
    "thick_oil": {
        "diffusion"   : 0.00001,
        "viscosity"   : 0.0005,
        "dissipation" : 0.998,
        "buoyancy"    : -0.1,
        "iterations"  : 40,     # higher quality for thick fluid
    },
    "cosmic_wind": {
        "diffusion"   : 0.001,
        "viscosity"   : 0.0,
        "dissipation" : 0.99,
        "buoyancy"    : 0.05,
        "iterations"  : 10,     # fast, chaotic
    },
}
