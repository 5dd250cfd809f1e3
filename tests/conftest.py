import pytest

from darkfluid import FluidConfig, FluidGrid, FluidSolver


@pytest.fixture
def grid():
    return FluidGrid(N=16)


@pytest.fixture
def still_config():
    """No diffusion, viscosity, buoyancy or decay: only transport acts."""
    return FluidConfig(viscosity=0.0, diffusion=0.0, dissipation=1.0,
                       velocity_dissipation=1.0, buoyancy=0.0, iterations=20)


@pytest.fixture
def solver(grid):
    return FluidSolver(grid, FluidConfig())
