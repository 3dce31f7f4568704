"""
Lattice Storage

GridState holds the nine directional values of every cell as a Structure of
Arrays: ``speeds[k]`` is a dense row-major (ny, nx) buffer for direction k,
so the flat index of cell (x, y) is ``x + y * nx``.

Two GridState instances are used per run and swapped after every timestep.
The obstacle mask is a plain boolean array of shape (ny, nx) that is
write-protected once built.
"""

import numpy as np

from .lattice import W, Q


class GridState:
    """
    Distribution functions for an nx x ny periodic domain.

    Parameters
    ----------
    nx, ny : int
        Grid dimensions
    dtype : numpy dtype
        Floating point type of the buffers (default float64)

    Attributes
    ----------
    speeds : ndarray
        Distribution functions, shape (Q, ny, nx)
    """

    def __init__(self, nx, ny, dtype=np.float64):
        if nx <= 0 or ny <= 0:
            raise ValueError(f"grid dimensions must be positive, got {nx}x{ny}")
        self.nx = nx
        self.ny = ny
        self.speeds = np.zeros((Q, ny, nx), dtype=dtype)

    @classmethod
    def from_speeds(cls, speeds):
        """
        Wrap an existing (Q, ny, nx) array.

        A C-contiguous array is used as is; any other array is copied into
        a contiguous buffer.
        """
        speeds = np.ascontiguousarray(speeds)
        if speeds.ndim != 3 or speeds.shape[0] != Q:
            raise ValueError(f"expected shape (9, ny, nx), got {speeds.shape}")
        grid = cls.__new__(cls)
        grid.ny, grid.nx = speeds.shape[1:]
        grid.speeds = speeds
        return grid

    @property
    def shape(self):
        return self.speeds.shape

    @property
    def dtype(self):
        return self.speeds.dtype

    def initialize_equilibrium(self, density):
        """
        Set every cell to the zero-velocity equilibrium.

        Direction 0 gets 4/9 * density, the axis directions 1/9 * density and
        the diagonals 1/36 * density.
        """
        for k in range(Q):
            self.speeds[k].fill(W[k] * density)
        return self

    def total_mass(self):
        """Return the sum of all values (should be conserved)."""
        return float(np.sum(self.speeds, dtype=np.float64))

    def cell(self, x, y):
        """Return a copy of the nine values of cell (x, y)."""
        return self.speeds[:, y, x].copy()

    def copy(self):
        return GridState.from_speeds(self.speeds.copy())

    def __repr__(self):
        return f"GridState(nx={self.nx}, ny={self.ny}, dtype={self.dtype})"


def create_obstacle_mask(nx, ny, cells=()):
    """
    Create a read-only obstacle mask.

    Parameters
    ----------
    nx, ny : int
        Grid dimensions
    cells : iterable of (x, y)
        Blocked cells

    Returns
    -------
    mask : ndarray
        Boolean mask (True for obstacle), shape (ny, nx)
    """
    mask = np.zeros((ny, nx), dtype=bool)
    for x, y in cells:
        if not (0 <= x < nx and 0 <= y < ny):
            raise ValueError(f"obstacle ({x}, {y}) outside {nx}x{ny} grid")
        mask[y, x] = True
    mask.setflags(write=False)
    return mask


def check_obstacle_mask(obstacles, nx, ny):
    """
    Validate an obstacle mask against the grid dimensions.

    Returns a read-only boolean copy of the mask.

    Raises
    ------
    ValueError
        If the shape does not match or every cell is blocked.
    """
    obstacles = np.asarray(obstacles)
    if obstacles.shape != (ny, nx):
        raise ValueError(
            f"obstacle mask shape {obstacles.shape} does not match grid ({ny}, {nx})"
        )
    mask = obstacles.astype(bool)
    if mask.all():
        raise ValueError("obstacle mask blocks every cell")
    mask.setflags(write=False)
    return mask
