"""
Tests for macroscopic observables, the average velocity and the Reynolds number.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from d2q9_bgk.lattice import CS2, Q
from d2q9_bgk.collision import omega_from_viscosity, viscosity_from_omega
from d2q9_bgk.equilibrium import compute_equilibrium
from d2q9_bgk.grid import GridState, create_obstacle_mask
from d2q9_bgk.observables import (
    av_velocity,
    av_velocity_fast,
    calc_reynolds,
    compute_macroscopic,
    compute_pressure,
    compute_velocity_magnitude,
    finish_average,
    total_density,
)
from d2q9_bgk.params import ParameterSet

REDUCTIONS = [av_velocity, av_velocity_fast]


def uniform_flow(nx, ny, ux, uy, rho=1.0):
    shape = (ny, nx)
    return compute_equilibrium(np.full(shape, rho), np.full(shape, ux), np.full(shape, uy))


class TestMacroscopic:

    def test_recovers_density_and_velocity(self):
        f = uniform_flow(5, 4, 0.03, -0.02, rho=0.8)
        rho, ux, uy = compute_macroscopic(f)

        np.testing.assert_allclose(rho, 0.8, rtol=1e-14)
        np.testing.assert_allclose(ux, 0.03, rtol=1e-12)
        np.testing.assert_allclose(uy, -0.02, rtol=1e-12)

    def test_pressure(self):
        rho = np.array([[0.3, 1.2]])
        np.testing.assert_allclose(compute_pressure(rho), rho * CS2)

    def test_velocity_magnitude(self):
        assert compute_velocity_magnitude(3.0, 4.0) == 5.0

    def test_total_density(self):
        grid = GridState(7, 3).initialize_equilibrium(0.2)
        assert np.isclose(total_density(grid.speeds), 0.2 * 21)


@pytest.mark.parametrize("reduce", REDUCTIONS)
class TestAverageVelocity:

    def test_rest_state_is_zero(self, reduce):
        f = GridState(6, 6).initialize_equilibrium(0.1).speeds
        assert reduce(f, create_obstacle_mask(6, 6)) == 0.0

    def test_uniform_flow(self, reduce):
        f = uniform_flow(8, 4, 0.03, 0.04)
        assert np.isclose(reduce(f, create_obstacle_mask(8, 4)), 0.05, rtol=1e-12)

    def test_obstacles_excluded(self, reduce):
        """Only open cells enter both the sum and the count."""
        f = uniform_flow(4, 4, 0.01, 0.0)
        obstacles = create_obstacle_mask(4, 4, [(0, 0), (3, 2)])
        # Obstacle cells carry a much larger velocity
        f[:, 0, 0] = uniform_flow(1, 1, 0.3, 0.0)[:, 0, 0]
        f[:, 2, 3] = uniform_flow(1, 1, 0.0, -0.3)[:, 0, 0]

        assert np.isclose(reduce(f, obstacles), 0.01, rtol=1e-12)

    def test_collapsed_open_cell(self, reduce):
        f = uniform_flow(4, 4, 0.01, 0.0)
        f[:, 1, 2] = 0.0

        with pytest.raises(FloatingPointError):
            reduce(f, create_obstacle_mask(4, 4))

    def test_collapsed_obstacle_cell_is_ignored(self, reduce):
        f = uniform_flow(4, 4, 0.01, 0.0)
        f[:, 1, 2] = 0.0

        assert np.isclose(reduce(f, create_obstacle_mask(4, 4, [(2, 1)])), 0.01)

    def test_all_blocked(self, reduce):
        f = uniform_flow(3, 3, 0.01, 0.0)
        with pytest.raises(ValueError, match="no open cells"):
            reduce(f, np.ones((3, 3), dtype=bool))


class TestReductionsAgree:

    def test_random_field(self):
        rng = np.random.default_rng(21)
        f = 0.1 * rng.random((Q, 40, 30)) + 0.01
        obstacles = rng.random((40, 30)) < 0.2

        assert np.isclose(av_velocity_fast(f, obstacles), av_velocity(f, obstacles),
                          rtol=1e-12)


class TestFinishAverage:

    def test_mean(self):
        assert finish_average(3.0, 4, 0) == 0.75

    def test_collapsed_takes_precedence(self):
        with pytest.raises(FloatingPointError, match="2 open cell"):
            finish_average(0.0, 0, 2)


class TestViscosity:

    def test_omega_one(self):
        assert np.isclose(viscosity_from_omega(1.0), 1.0 / 6.0)

    def test_formula(self):
        for omega in (0.5, 1.0, 1.7, 1.99):
            expected = (1.0 / 6.0) * (2.0 / omega - 1.0)
            assert np.isclose(viscosity_from_omega(omega), expected, rtol=1e-14)

    def test_round_trip(self):
        assert np.isclose(omega_from_viscosity(viscosity_from_omega(1.85)), 1.85)

    @pytest.mark.parametrize("omega", [0.0, 2.0, -0.5, 2.5])
    def test_out_of_range(self, omega):
        with pytest.raises(ValueError, match="omega"):
            viscosity_from_omega(omega)

    def test_non_positive_viscosity(self):
        with pytest.raises(ValueError):
            omega_from_viscosity(0.0)


class TestReynolds:

    @pytest.fixture
    def params(self):
        return ParameterSet(nx=8, ny=4, max_iters=0, reynolds_dim=4,
                            density=1.0, accel=0.0, omega=1.0)

    @pytest.mark.parametrize("use_fast", [True, False])
    def test_reynolds_number(self, params, use_fast):
        f = uniform_flow(8, 4, 0.02, 0.0)
        re = calc_reynolds(params, f, create_obstacle_mask(8, 4), use_fast=use_fast)

        # 0.02 * 4 / (1/6)
        assert np.isclose(re, 0.48, rtol=1e-12)

    def test_rest_state(self, params):
        f = GridState(8, 4).initialize_equilibrium(1.0).speeds
        assert calc_reynolds(params, f, create_obstacle_mask(8, 4)) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
