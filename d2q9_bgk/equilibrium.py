"""
Equilibrium Distribution Functions

Maxwell-Boltzmann equilibrium for D2Q9 lattice.

The equilibrium distribution is the Maxwell-Boltzmann distribution truncated
to second order in velocity. With c = 1/c_s^2 = 3:

    f_i^eq = w_i * rho * [1 + c*(e_i · u) + 1.5*c*(e_i · u)^2 - 0.5*c*u^2]

where:
    - w_i are the lattice weights (4/9, 1/9, 1/36)
    - e_i are the lattice velocities
    - rho is the density
    - u = (ux, uy) is the macroscopic velocity
"""

import numpy as np
from .lattice import EX, EY, W, C, Q


def compute_equilibrium(rho, ux, uy):
    """
    Compute equilibrium distribution for all lattice sites.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    ux : ndarray
        X-velocity field, shape (ny, nx)
    uy : ndarray
        Y-velocity field, shape (ny, nx)

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q, ny, nx)
    """
    rho = np.asarray(rho, dtype=np.float64)
    f_eq = np.zeros((Q,) + rho.shape, dtype=np.float64)

    u_sq = ux * ux + uy * uy

    for i in range(Q):
        # e_i · u
        eu = EX[i] * ux + EY[i] * uy
        f_eq[i] = W[i] * rho * (1.0 + eu * C + (eu * eu) * (1.5 * C) - u_sq * (0.5 * C))

    return f_eq


def equilibrium_single_site(rho, ux, uy):
    """
    Compute equilibrium distribution for a single lattice site.

    Parameters
    ----------
    rho : float
        Density at the site
    ux, uy : float
        Velocity at the site

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,)
    """
    f_eq = np.zeros(Q, dtype=np.float64)
    u_sq = ux * ux + uy * uy

    for i in range(Q):
        eu = EX[i] * ux + EY[i] * uy
        f_eq[i] = W[i] * rho * (1.0 + eu * C + (eu * eu) * (1.5 * C) - u_sq * (0.5 * C))

    return f_eq
