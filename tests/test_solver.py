import logging

import numpy as np
import pytest

from darkfluid import FluidConfig, FluidGrid, FluidSolver
from darkfluid.solver import PERF_LOG_SIZE


def _seed_blob(grid, x0, x1, y0, y1, value):
    grid.as_2d(grid.density)[y0:y1, x0:x1] = value


def _centroid_row(grid):
    d = grid.as_2d(grid.density).astype(np.float64)
    rows = np.arange(grid.N)[:, np.newaxis]
    return float((rows * d).sum() / d.sum())


def test_solver_copies_iterations(grid):
    solver = FluidSolver(grid, FluidConfig(iterations=7))
    assert solver.iter == 7
    solver.iter = 3
    assert solver.config.iterations == 7


def test_zero_grid_stays_zero():
    grid = FluidGrid(N=24)
    solver = FluidSolver(grid, FluidConfig(iterations=13, buoyancy=2.0))
    for dt in (0.01, 0.1, 5.0):
        solver.step(dt)
    for arr in (grid.density, grid.vx, grid.vy, grid.pressure, grid.divergence):
        assert not arr.any()


def test_density_conserved_without_motion(still_config):
    grid = FluidGrid(N=64)
    _seed_blob(grid, 28, 36, 28, 36, 50.0)
    before = grid.get_total_density()
    solver = FluidSolver(grid, still_config)
    for _ in range(100):
        solver.step(0.1)
    assert abs(grid.get_total_density() - before) / before < 0.01


def test_density_conserved_in_gentle_swirl(still_config):
    grid = FluidGrid(N=64)
    _seed_blob(grid, 28, 36, 28, 36, 50.0)
    vx, vy = grid.as_2d(grid.vx), grid.as_2d(grid.vy)
    for j in range(20, 44):
        for i in range(20, 44):
            vx[j, i] = -(j - 32) * 0.001
            vy[j, i] = (i - 32) * 0.001
    before = grid.get_total_density()
    solver = FluidSolver(grid, still_config)
    for _ in range(100):
        solver.step(0.1)
    assert abs(grid.get_total_density() - before) / before < 0.01


def test_scenario_injection_spreads_to_neighbours():
    grid = FluidGrid(N=16)
    solver = FluidSolver(grid, FluidConfig(iterations=20))
    grid.add_density(8, 8, 500.0)
    grid.add_velocity(8, 8, 10.0, 10.0)
    injected = grid.get_total_density()
    assert injected == pytest.approx(255.0)

    metrics = solver.step(0.1)

    for x, y in ((9, 8), (7, 8), (8, 9), (8, 7)):
        value = grid.density[grid.ix(x, y)]
        assert 0.0 < value < injected
    total = grid.get_total_density()
    assert 0.0 < total <= injected * solver.config.dissipation
    assert metrics["density_total"] == pytest.approx(total)


def test_scenario_without_velocity_keeps_mass():
    grid = FluidGrid(N=16)
    solver = FluidSolver(grid, FluidConfig(iterations=20))
    grid.add_density(8, 8, 500.0)
    expected = grid.get_total_density() * solver.config.dissipation

    solver.step(0.1)

    centre = grid.density[grid.ix(8, 8)]
    for x, y in ((9, 8), (7, 8), (8, 9), (8, 7)):
        assert 0.0 < grid.density[grid.ix(x, y)] < centre
    assert grid.get_total_density() == pytest.approx(expected, rel=0.05)


def test_obstacle_cells_stay_zero():
    grid = FluidGrid(N=32)
    grid.add_obstacle(10, 10, 13, 13)
    grid.add_obstacle(0, 0, 0, 0)      # corner
    grid.add_obstacle(5, 0, 5, 0)      # top wall
    solver = FluidSolver(grid, FluidConfig(buoyancy=0.5))
    solid = grid.obstacles == 1
    for _ in range(20):
        grid.add_density(8, 12, 100.0)
        grid.add_velocity(8, 12, 5.0, 0.0)
        solver.step(0.1)
        assert not grid.density[solid].any()
        assert not grid.vx[solid].any()
        assert not grid.vy[solid].any()
    assert grid.get_total_density() > 0


def test_buoyancy_lifts_dense_fluid():
    grid = FluidGrid(N=32)
    _seed_blob(grid, 14, 18, 18, 22, 10.0)
    start = _centroid_row(grid)
    solver = FluidSolver(grid, FluidConfig(buoyancy=1.0))
    for _ in range(10):
        solver.step(0.1)
    # rows grow downward, rising means a smaller row index
    assert _centroid_row(grid) < start - 1.0


def test_dissipation_decays_fields(still_config):
    grid = FluidGrid(N=16)
    still_config.dissipation = 0.5
    still_config.velocity_dissipation = 0.5
    grid.density[:] = 4.0
    solver = FluidSolver(grid, still_config)
    solver.step(0.1)
    assert np.allclose(grid.density, 2.0)


def test_step_metrics_and_perf_log(solver):
    solver.grid.add_density(8, 8, 50.0)
    m1 = solver.step(0.1)
    m2 = solver.step(0.1)
    assert (m1["frame"], m2["frame"]) == (1, 2)
    assert list(solver.perf_log) == [m1, m2]
    for key in ("total_ms", "forces_ms", "diffuse_vel_ms", "project1_ms",
                "advect_vel_ms", "project2_ms", "diffuse_den_ms",
                "advect_den_ms", "dissipate_ms", "divergence_mean"):
        assert m2[key] >= 0.0
    assert m2["finite"] is True


def test_perf_log_keeps_only_recent_frames(grid, still_config):
    solver = FluidSolver(grid, still_config, perf_log_size=3)
    for _ in range(5):
        solver.step(0.1)
    assert len(solver.perf_log) == 3
    assert [m["frame"] for m in solver.perf_log] == [3, 4, 5]


def test_perf_log_default_cap(grid):
    assert FluidSolver(grid).perf_log.maxlen == PERF_LOG_SIZE


def test_iter_change_applies_live(solver):
    solver.grid.add_velocity(8, 8, 3.0, 0.0)
    solver.iter = 1
    solver.step(0.1)
    solver.iter = 60
    solver.step(0.1)
    assert solver.frame == 2


def test_solver_follows_grid_resize(grid):
    solver = FluidSolver(grid)
    solver.step(0.1)
    grid.reset(24, 24)
    grid.add_density(12, 12, 30.0)
    solver.step(0.1)
    assert grid.density.shape == (576,)
    assert grid.get_total_density() > 0


def test_non_finite_values_are_reported(grid, caplog):
    solver = FluidSolver(grid)
    grid.vx[grid.ix(8, 8)] = np.inf
    with caplog.at_level(logging.WARNING, logger="darkfluid.solver"):
        metrics = solver.step(0.1)
    assert metrics["finite"] is False
    assert "Non-finite" in caplog.text


def test_non_finite_check_can_be_disabled(grid, caplog):
    solver = FluidSolver(grid, FluidConfig(check_finite=False))
    grid.vx[grid.ix(8, 8)] = np.nan
    with caplog.at_level(logging.WARNING, logger="darkfluid.solver"):
        metrics = solver.step(0.1)
    assert metrics["finite"] is True
    assert "Non-finite" not in caplog.text
