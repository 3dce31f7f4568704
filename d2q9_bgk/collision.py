"""
Collision Operators

BGK relaxation for open cells and bounce-back reflection for obstacles.

The BGK operator relaxes the streamed distribution toward equilibrium with
the relaxation parameter omega:

    f_out = f + omega * (f_eq - f)

omega is tied to the kinematic viscosity by

    nu = c_s^2 * (1/omega - 0.5) = (1/6) * (2/omega - 1)

Stability requires 0 < omega < 2 (nu > 0).
"""

import numpy as np
from .lattice import CS2, OPPOSITE


def viscosity_from_omega(omega):
    """
    Compute kinematic viscosity from the relaxation parameter.

    Parameters
    ----------
    omega : float
        Relaxation parameter, 0 < omega < 2

    Returns
    -------
    nu : float
        Kinematic viscosity
    """
    if not 0.0 < omega < 2.0:
        raise ValueError(f"omega must be in (0, 2) for a positive viscosity, got {omega}")
    return CS2 * (1.0 / omega - 0.5)


def omega_from_viscosity(nu):
    """
    Compute the relaxation parameter from kinematic viscosity.

    omega = 1 / (nu / c_s^2 + 0.5)
    """
    if nu <= 0.0:
        raise ValueError(f"viscosity must be > 0, got {nu}")
    return 1.0 / (nu / CS2 + 0.5)


def bgk_collision(f, f_eq, omega):
    """
    BGK (Bhatnagar-Gross-Krook) relaxation.

    Parameters
    ----------
    f : ndarray
        Streamed distribution, shape (Q, ...)
    f_eq : ndarray
        Equilibrium distribution, same shape as f
    omega : float
        Relaxation parameter

    Returns
    -------
    f_out : ndarray
        Post-collision distribution
    """
    return f + omega * (f_eq - f)


def bounce_back(f):
    """
    Reflect every direction into its opposite (no-slip obstacle).

    The rest direction is unchanged. Applying it twice is the identity.

    Parameters
    ----------
    f : ndarray
        Streamed distribution, shape (Q, ...)

    Returns
    -------
    f_out : ndarray
        Reflected distribution
    """
    return np.asarray(f)[OPPOSITE].copy()
