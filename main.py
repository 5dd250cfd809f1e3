"""
main.py — Master Entry Point
============================
Top-level script that runs everything.

Usage:
    python main.py                              # Headless run (default)
    python main.py --mode live                  # Interactive window
    python main.py --mode benchmark             # Per-stage timing breakdown
    python main.py --mode record --output runs  # Save snapshots to disk
    python main.py --preset thick_oil --size 96 --iterations 40
"""

import argparse
import logging

import numpy as np

from darkfluid import PRESETS, FluidConfig, FluidGrid, FluidSolver, Palette
from darkfluid.forces import splat


def build_solver(args) -> FluidSolver:
    """Grid + solver from CLI args; explicit flags override the preset."""
    config = FluidConfig.from_preset(
        args.preset,
        viscosity=args.viscosity,
        diffusion=args.diffusion,
        buoyancy=args.buoyancy,
        iterations=args.iterations,
    )
    return FluidSolver(FluidGrid(N=args.size), config)


def emitter(grid, frame):
    """Smoke source near the bottom center, swaying sideways."""
    N = grid.N
    sway = np.sin(frame * 0.05) * 2.0
    splat(grid, N // 2, N - 6, amount=40.0, dx=sway, dy=-8.0, radius=2)


def run_live(args):
    """Live interactive visualization."""
    from visualizer import FluidVisualizer

    print(f"Starting live simulation (N={args.size}, preset={args.preset})...")
    print("Drag to paint. 'v' cycles views, 'r' resets. Close the window to exit.\n")

    viz = FluidVisualizer(build_solver(args), dt=args.dt,
                          palette=Palette.from_preset(args.preset))
    viz.run(fps=30)


def run_headless(args):
    """Run simulation without display — prints stats every 10 frames."""
    print(f"\nHeadless simulation | N={args.size} | {args.frames} frames | preset={args.preset}")
    print(f"{'─'*60}")

    solver = build_solver(args)
    total_times = []

    for f in range(args.frames):
        emitter(solver.grid, f)
        metrics = solver.step(args.dt)
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_mean={metrics['divergence_mean']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    solver.print_status()


def run_benchmark(args):
    """
    Detailed performance breakdown.
    Shows how long each physics step takes.
    """
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | N={args.size} | {args.frames} frames | iter={args.iterations or 'preset'}")
    print(f"{'='*60}")

    solver = build_solver(args)

    # Warm up (first calls compile the kernels)
    for f in range(5):
        emitter(solver.grid, f)
        solver.step(args.dt)

    logs = []
    for f in range(args.frames):
        emitter(solver.grid, f)
        logs.append(solver.step(args.dt))

    keys = ["forces_ms", "diffuse_vel_ms", "project1_ms",
            "advect_vel_ms", "project2_ms", "diffuse_den_ms",
            "advect_den_ms", "dissipate_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.2f}ms {np.min(vals):>7.2f}ms {np.max(vals):>7.2f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


def run_record(args):
    """Simulate and save snapshots for playback / analysis."""
    from data_pipeline import SnapshotRecorder

    print(f"\nRecording {args.frames} frames (N={args.size}) → {args.output}/")
    recorder = SnapshotRecorder(args.output, build_solver(args), save_every=args.save_every)
    meta = recorder.record(n_frames=args.frames, dt=args.dt, source=emitter)
    print(f"✓ Saved {len(meta['saved_frames'])} snapshots. Metadata: {args.output}/metadata.json")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="darkfluid — 2D Stable Fluids")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark", "record"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--size",       type=int,   default=128, help="Grid side length (default: 128)")
    parser.add_argument("--frames",     type=int,   default=100, help="Number of frames")
    parser.add_argument("--dt",         type=float, default=0.1, help="Timestep (default: 0.1)")
    parser.add_argument("--preset",     choices=sorted(PRESETS), default="default_void")
    parser.add_argument("--iterations", type=int,   default=None, help="Gauss-Seidel sweeps (overrides preset)")
    parser.add_argument("--viscosity",  type=float, default=None, help="Overrides preset viscosity")
    parser.add_argument("--diffusion",  type=float, default=None, help="Overrides preset diffusion")
    parser.add_argument("--buoyancy",   type=float, default=None, help="Overrides preset buoyancy")
    parser.add_argument("--output",     default="runs", help="Record mode output directory")
    parser.add_argument("--save-every", type=int,   default=2, help="Record every Nth frame")
    parser.add_argument("--log-level",  default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
    elif args.mode == "record":
        run_record(args)
