"""
Run Parameters

Immutable constants for one D2Q9-BGK run.
"""

import warnings
from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterSet:
    """
    Parameters of a simulation run.

    Parameters
    ----------
    nx, ny : int
        Number of cells in x- and y-direction
    max_iters : int
        Number of timesteps
    reynolds_dim : int
        Characteristic length used for the Reynolds number
    density : float
        Initial density per cell
    accel : float
        Density redistribution applied by the forcing row
    omega : float
        Relaxation parameter (stable for 0 < omega < 2)
    """

    nx: int
    ny: int
    max_iters: int
    reynolds_dim: int
    density: float
    accel: float
    omega: float

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Check the constraints on the run constants.

        Raises
        ------
        ValueError
            If the grid is empty, the iteration count is negative or the
            density is not positive.
        """
        if self.nx <= 0 or self.ny <= 0:
            raise ValueError(f"grid dimensions must be positive, got {self.nx}x{self.ny}")
        if self.max_iters < 0:
            raise ValueError(f"max_iters must be >= 0, got {self.max_iters}")
        if self.density <= 0.0:
            raise ValueError(f"density must be > 0, got {self.density}")
        if not 0.0 < self.omega < 2.0:
            warnings.warn(
                f"omega = {self.omega} is outside (0, 2); "
                f"the simulation is likely to be unstable."
            )
        return self

    @property
    def num_cells(self):
        return self.nx * self.ny

    @property
    def viscosity(self):
        """Kinematic viscosity implied by omega."""
        from .collision import viscosity_from_omega
        return viscosity_from_omega(self.omega)
