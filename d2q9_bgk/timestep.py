"""
Fused Stream-Collide Timestep

One pass over the current grid produces the next grid:

1. Pull the nine values arriving at each cell (periodic wrap on both axes)
2. Obstacle cell: reflect them into the opposite directions (bounce-back)
3. Open cell: compute density and velocity, relax toward equilibrium (BGK)
   and add |u| to the average velocity reduction

Reads come only from ``f_in`` and writes go only to ``f_out``, so cells can
be processed in any order and rows are distributed over threads without
synchronisation. The caller swaps the two buffers afterwards.
"""

import numpy as np
from numba import njit, prange

from .lattice import EX, EY, W, C, Q, OPPOSITE
from .collision import bgk_collision, bounce_back
from .equilibrium import compute_equilibrium
from .forcing import accelerate_flow, accelerate_flow_fast
from .observables import compute_density, compute_velocity, finish_average
from .streaming import stream_periodic


def check_buffers(f_in, f_out, obstacles):
    """
    Validate the shapes of a stream-collide call.

    Raises
    ------
    ValueError
        If the buffers or the mask disagree in shape, or the buffers alias.
    """
    if f_in.ndim != 3 or f_in.shape[0] != Q:
        raise ValueError(f"expected distribution of shape (9, ny, nx), got {f_in.shape}")
    if f_out.shape != f_in.shape:
        raise ValueError(f"output shape {f_out.shape} does not match input {f_in.shape}")
    if obstacles.shape != f_in.shape[1:]:
        raise ValueError(
            f"obstacle mask shape {obstacles.shape} does not match grid {f_in.shape[1:]}"
        )
    if np.may_share_memory(f_in, f_out):
        raise ValueError("input and output distributions must not share memory")


def stream_collide(f_in, f_out, obstacles, omega):
    """
    Fused streaming, bounce-back and BGK collision (NumPy reference).

    Parameters
    ----------
    f_in : ndarray
        Current distribution, shape (Q, ny, nx)
    f_out : ndarray
        Next distribution, shape (Q, ny, nx). Overwritten.
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    omega : float
        Relaxation parameter

    Returns
    -------
    av_u : float
        Average velocity magnitude over open cells
    """
    obstacles = np.asarray(obstacles, dtype=bool)
    check_buffers(f_in, f_out, obstacles)
    open_cells = ~obstacles

    f_streamed = stream_periodic(f_in)

    rho = compute_density(f_streamed)
    n_collapsed = int(np.count_nonzero(rho[open_cells] <= 0.0))
    if n_collapsed:
        return finish_average(0.0, 0, n_collapsed)

    ux, uy = compute_velocity(f_streamed, rho)
    f_eq = compute_equilibrium(rho, ux, uy)

    f_out[:] = np.where(
        obstacles,
        bounce_back(f_streamed),
        bgk_collision(f_streamed, f_eq, omega),
    )

    u = np.sqrt(ux * ux + uy * uy)[open_cells]
    return finish_average(float(np.sum(u)), u.size, 0)


@njit(parallel=True, cache=True)
def stream_collide_numba(f_in, f_out, obstacles, omega, ex, ey, w, opposite, c, scratch):
    """
    Numba-accelerated fused timestep.

    Parameters
    ----------
    f_in : ndarray
        Current distribution, shape (Q, ny, nx)
    f_out : ndarray
        Next distribution, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    omega : float
        Relaxation parameter
    ex, ey : ndarray
        Lattice velocities
    w : ndarray
        Lattice weights
    opposite : ndarray
        Opposite direction indices
    c : float
        Equilibrium scale factor (1 / c_s^2)
    scratch : ndarray
        Per-row workspace, shape (ny, Q)

    Returns
    -------
    tot_u : float
        Sum of |u| over open cells
    tot_cells : int
        Number of open cells
    n_collapsed : int
        Number of open cells with non-positive density
    """
    q, ny, nx = f_in.shape
    tot_u = 0.0
    tot_cells = 0
    n_collapsed = 0

    for j in prange(ny):
        f_local = scratch[j]
        for i in range(nx):
            # Pull from the neighbours with periodic wrapping
            for k in range(q):
                i_src = (i - ex[k] + nx) % nx
                j_src = (j - ey[k] + ny) % ny
                f_local[k] = f_in[k, j_src, i_src]

            if obstacles[j, i]:
                # Bounce-back
                for k in range(q):
                    f_out[opposite[k], j, i] = f_local[k]
            else:
                rho_local = 0.0
                rho_ux = 0.0
                rho_uy = 0.0
                for k in range(q):
                    rho_local += f_local[k]
                    rho_ux += f_local[k] * ex[k]
                    rho_uy += f_local[k] * ey[k]

                if rho_local > 0.0:
                    ux = rho_ux / rho_local
                    uy = rho_uy / rho_local
                    u_sq = ux * ux + uy * uy

                    for k in range(q):
                        eu = ex[k] * ux + ey[k] * uy
                        f_eq = w[k] * rho_local * (
                            1.0 + eu * c + (eu * eu) * (1.5 * c) - u_sq * (0.5 * c)
                        )
                        f_out[k, j, i] = f_local[k] + omega * (f_eq - f_local[k])

                    tot_u += np.sqrt(u_sq)
                    tot_cells += 1
                else:
                    for k in range(q):
                        f_out[k, j, i] = f_local[k]
                    n_collapsed += 1

    return tot_u, tot_cells, n_collapsed


def stream_collide_fast(f_in, f_out, obstacles, omega):
    """
    Fast fused timestep using Numba.

    Parameters
    ----------
    f_in : ndarray
        Current distribution, shape (Q, ny, nx)
    f_out : ndarray
        Next distribution, shape (Q, ny, nx). Overwritten.
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    omega : float
        Relaxation parameter

    Returns
    -------
    av_u : float
        Average velocity magnitude over open cells
    """
    obstacles = np.asarray(obstacles, dtype=np.bool_)
    check_buffers(f_in, f_out, obstacles)
    scratch = np.empty((f_in.shape[1], Q), dtype=np.float64)

    tot_u, tot_cells, n_collapsed = stream_collide_numba(
        f_in, f_out, obstacles, omega, EX, EY, W, OPPOSITE, C, scratch
    )
    return finish_average(tot_u, tot_cells, n_collapsed)


def timestep(params, f_in, f_out, obstacles, use_fast=True):
    """
    Perform one full iteration: forcing, then the fused stream-collide pass.

    The forcing modifies ``f_in`` in place; ``f_out`` receives the new state.

    Parameters
    ----------
    params : ParameterSet
        Run parameters
    f_in, f_out : ndarray
        Current and next distributions, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    use_fast : bool
        Use the Numba kernels (default True)

    Returns
    -------
    av_u : float
        Average velocity magnitude over open cells

    Raises
    ------
    ValueError
        If the buffers or the mask disagree in shape. ``f_in`` is left
        untouched in that case.
    """
    check_buffers(f_in, f_out, np.asarray(obstacles, dtype=bool))

    if use_fast:
        accelerate_flow_fast(f_in, obstacles, params.density, params.accel)
        return stream_collide_fast(f_in, f_out, obstacles, params.omega)

    accelerate_flow(f_in, obstacles, params.density, params.accel)
    return stream_collide(f_in, f_out, obstacles, params.omega)
