"""
Flow Acceleration

Drives the flow by redistributing density inside the cells of one row.

On row ny - 2 of the current grid, every open cell moves

    w1 = density * accel / 9     from W  to E
    w2 = density * accel / 36    from NW to NE and from SW to SE

provided none of the west-side values would drop to zero or below. Cells that
fail the check are left untouched. The cell's density is unchanged, only its
momentum is, so total mass is conserved.
"""

import numpy as np
from numba import njit


def forcing_weights(density, accel):
    """Return the (axis, diagonal) amounts moved per forced cell."""
    return density * accel / 9.0, density * accel / 36.0


def accelerate_flow(f, obstacles, density, accel):
    """
    Apply the row forcing in place (NumPy).

    Parameters
    ----------
    f : ndarray
        Current distribution, shape (Q, ny, nx). Modified in place.
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    density : float
        Reference density
    accel : float
        Acceleration

    Returns
    -------
    n_forced : int
        Number of cells that received the update
    """
    q, ny, nx = f.shape
    if ny < 2:
        return 0

    w1, w2 = forcing_weights(density, accel)
    jj = ny - 2
    row = f[:, jj, :]

    forced = (
        ~np.asarray(obstacles[jj], dtype=bool)
        & (row[3] - w1 > 0.0)
        & (row[6] - w2 > 0.0)
        & (row[7] - w2 > 0.0)
    )

    # increase 'east-side' densities
    row[1, forced] += w1
    row[5, forced] += w2
    row[8, forced] += w2
    # decrease 'west-side' densities
    row[3, forced] -= w1
    row[6, forced] -= w2
    row[7, forced] -= w2

    return int(np.count_nonzero(forced))


@njit(cache=True)
def accelerate_flow_numba(f, obstacles, w1, w2):
    """
    Numba-accelerated row forcing.

    Parameters
    ----------
    f : ndarray
        Current distribution, shape (Q, ny, nx). Modified in place.
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    w1, w2 : float
        Axis and diagonal amounts moved per cell
    """
    q, ny, nx = f.shape
    jj = ny - 2
    n_forced = 0

    for i in range(nx):
        if (not obstacles[jj, i]
                and f[3, jj, i] - w1 > 0.0
                and f[6, jj, i] - w2 > 0.0
                and f[7, jj, i] - w2 > 0.0):
            f[1, jj, i] += w1
            f[5, jj, i] += w2
            f[8, jj, i] += w2
            f[3, jj, i] -= w1
            f[6, jj, i] -= w2
            f[7, jj, i] -= w2
            n_forced += 1

    return n_forced


def accelerate_flow_fast(f, obstacles, density, accel):
    """
    Fast row forcing using Numba.

    Parameters
    ----------
    f : ndarray
        Current distribution, shape (Q, ny, nx). Modified in place.
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    density, accel : float
        Reference density and acceleration

    Returns
    -------
    n_forced : int
        Number of cells that received the update
    """
    if f.shape[1] < 2:
        return 0
    w1, w2 = forcing_weights(density, accel)
    return accelerate_flow_numba(f, np.asarray(obstacles, dtype=np.bool_), w1, w2)
