"""
Macroscopic Observable Extraction

Compute density, velocity, and derived quantities from distributions.

In LBM, macroscopic quantities are moments of the distribution function:
    - Density (0th moment): rho = sum_i(f_i)
    - Momentum (1st moment): rho*u = sum_i(f_i * e_i)

The average velocity is the mean of |u| over the open (non-obstacle) cells.
It is accumulated as a sum and a cell count so that partial results of
parallel workers can be combined in any order.
"""

import numpy as np
from numba import njit, prange
from .lattice import EX, EY, EAST, WEST, NORTH, SOUTH, CS2


def compute_density(f):
    """
    Compute density field from distribution functions.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)

    Returns
    -------
    rho : ndarray
        Density field, shape (ny, nx)
    """
    return np.sum(f, axis=0)


def compute_velocity(f, rho=None):
    """
    Compute velocity field from distribution functions.

    u_x = (f_E + f_NE + f_SE - f_W - f_NW - f_SW) / rho
    u_y = (f_N + f_NE + f_NW - f_S - f_SW - f_SE) / rho

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    rho : ndarray, optional
        Density field, shape (ny, nx). If None, computed from f.

    Returns
    -------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    """
    if rho is None:
        rho = compute_density(f)

    rho_ux = f[EAST].sum(axis=0) - f[WEST].sum(axis=0)
    rho_uy = f[NORTH].sum(axis=0) - f[SOUTH].sum(axis=0)

    # Avoid division by zero in empty cells
    rho_safe = np.where(rho > 0.0, rho, 1.0)

    return rho_ux / rho_safe, rho_uy / rho_safe


def compute_macroscopic(f):
    """
    Compute all macroscopic quantities from distribution functions.

    Returns
    -------
    rho, ux, uy : ndarray
        Density and velocity fields, shape (ny, nx)
    """
    rho = compute_density(f)
    ux, uy = compute_velocity(f, rho)
    return rho, ux, uy


def compute_pressure(rho, cs2=CS2):
    """
    Compute pressure field from density.

    p = rho * c_s^2
    """
    return rho * cs2


def compute_velocity_magnitude(ux, uy):
    """Velocity magnitude |u| = sqrt(ux^2 + uy^2)."""
    return np.sqrt(ux * ux + uy * uy)


def total_density(f):
    """Sum of all distribution values over the grid."""
    return float(np.sum(f, dtype=np.float64))


def finish_average(tot_u, tot_cells, n_collapsed):
    """
    Turn the reduced sum and count into the average velocity.

    Raises
    ------
    FloatingPointError
        If any open cell had a non-positive density.
    ValueError
        If there were no open cells.
    """
    if n_collapsed:
        raise FloatingPointError(
            f"non-positive local density in {n_collapsed} open cell(s)"
        )
    if tot_cells == 0:
        raise ValueError("no open cells to average over")
    return tot_u / tot_cells


def av_velocity(f, obstacles):
    """
    Average velocity magnitude over open cells (NumPy).

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)

    Returns
    -------
    av_u : float
        Mean |u| over cells where ``obstacles`` is False
    """
    open_cells = ~np.asarray(obstacles, dtype=bool)
    rho = compute_density(f)
    n_collapsed = int(np.count_nonzero(rho[open_cells] <= 0.0))
    ux, uy = compute_velocity(f, rho)
    u = compute_velocity_magnitude(ux, uy)[open_cells]
    return finish_average(float(np.sum(u)), u.size, n_collapsed)


@njit(parallel=True, cache=True)
def av_velocity_numba(f, obstacles, ex, ey):
    """
    Numba-accelerated average velocity reduction.

    Rows are distributed over threads; the sum, the cell count and the count
    of collapsed cells are reduction variables.

    Returns
    -------
    tot_u : float
        Sum of |u| over open cells
    tot_cells : int
        Number of open cells
    n_collapsed : int
        Number of open cells with non-positive density
    """
    q, ny, nx = f.shape
    tot_u = 0.0
    tot_cells = 0
    n_collapsed = 0

    for j in prange(ny):
        for i in range(nx):
            if not obstacles[j, i]:
                rho_local = 0.0
                rho_ux = 0.0
                rho_uy = 0.0
                for k in range(q):
                    f_k = f[k, j, i]
                    rho_local += f_k
                    rho_ux += f_k * ex[k]
                    rho_uy += f_k * ey[k]

                if rho_local > 0.0:
                    ux = rho_ux / rho_local
                    uy = rho_uy / rho_local
                    tot_u += np.sqrt(ux * ux + uy * uy)
                    tot_cells += 1
                else:
                    n_collapsed += 1

    return tot_u, tot_cells, n_collapsed


def av_velocity_fast(f, obstacles):
    """
    Fast average velocity using Numba.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)

    Returns
    -------
    av_u : float
        Mean |u| over open cells
    """
    ex = EX.astype(np.float64)
    ey = EY.astype(np.float64)
    tot_u, tot_cells, n_collapsed = av_velocity_numba(
        f, np.asarray(obstacles, dtype=np.bool_), ex, ey
    )
    return finish_average(tot_u, tot_cells, n_collapsed)


def calc_reynolds(params, f, obstacles, use_fast=True):
    """
    Reynolds number of the flow.

    Re = av_velocity * reynolds_dim / nu,  nu = (1/6) * (2/omega - 1)

    Parameters
    ----------
    params : ParameterSet
        Run parameters
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    use_fast : bool
        Use the Numba reduction (default True)

    Returns
    -------
    re : float
        Reynolds number
    """
    reduce = av_velocity_fast if use_fast else av_velocity
    return reduce(f, obstacles) * params.reynolds_dim / params.viscosity
