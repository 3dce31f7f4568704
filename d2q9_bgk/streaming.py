"""
Streaming Step

Propagation of distribution functions along lattice velocities.

The pull scheme is used throughout: every cell gathers direction i from the
neighbour it came from,

    f_i(x, t + dt) = f_i(x - e_i, t)

with indices wrapped on both axes (periodic domain).
"""

import numpy as np
from .lattice import EX, EY, Q


def stream_periodic(f):
    """
    Streaming step with periodic boundary conditions.

    Implemented with np.roll: ``np.roll(a, s)[x] == a[x - s]``.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)

    Returns
    -------
    f_streamed : ndarray
        Post-streaming distribution
    """
    f_out = np.empty_like(f)

    for i in range(Q):
        f_out[i] = np.roll(np.roll(f[i], EX[i], axis=1), EY[i], axis=0)

    return f_out


def pull_single_site(f, x, y):
    """
    Gather the streamed values arriving at cell (x, y).

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    x, y : int
        Cell coordinates

    Returns
    -------
    f_local : ndarray
        Streamed values, shape (Q,)
    """
    q, ny, nx = f.shape
    f_local = np.empty(q, dtype=f.dtype)
    for k in range(q):
        f_local[k] = f[k, (y - EY[k]) % ny, (x - EX[k]) % nx]
    return f_local
