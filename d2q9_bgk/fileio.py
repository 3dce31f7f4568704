"""
Input and Output Files

Parameter file
    Seven whitespace separated values: nx, ny, maxIters, reynolds_dim
    (integers) followed by density, accel, omega (floats).

Obstacle file
    One ``x y blocked`` line per obstacle cell; ``blocked`` must be 1.

Output files
    ``final_state.dat``: ``x y u_x u_y |u| pressure obstacle`` per cell
    ``av_vels.dat``: ``iteration:<TAB>average velocity`` per timestep
"""

import numpy as np

from .grid import create_obstacle_mask
from .lattice import CS2
from .observables import compute_macroscopic, compute_pressure, compute_velocity_magnitude
from .params import ParameterSet

FINAL_STATE_FILE = "final_state.dat"
AV_VELS_FILE = "av_vels.dat"

PARAM_FIELDS = (
    ("nx", int),
    ("ny", int),
    ("max_iters", int),
    ("reynolds_dim", int),
    ("density", float),
    ("accel", float),
    ("omega", float),
)

FINAL_STATE_FMT = ["%d", "%d", "%.12E", "%.12E", "%.12E", "%.12E", "%d"]
AV_VELS_FMT = "%d:\t%.12E"


def load_params(path):
    """
    Read a parameter file.

    Parameters
    ----------
    path : str or Path
        Parameter file

    Returns
    -------
    params : ParameterSet
        Validated run parameters

    Raises
    ------
    OSError
        If the file cannot be opened
    ValueError
        If a value is missing or malformed
    """
    try:
        with open(path) as fp:
            tokens = fp.read().split()
    except OSError as e:
        raise OSError(f"could not open input parameter file: {path}") from e

    values = {}
    for idx, (name, convert) in enumerate(PARAM_FIELDS):
        label = "maxIters" if name == "max_iters" else name
        if idx >= len(tokens):
            raise ValueError(f"could not read param file: {label}")
        try:
            values[name] = convert(tokens[idx])
        except ValueError:
            raise ValueError(
                f"could not read param file: {label} (got {tokens[idx]!r})"
            ) from None

    return ParameterSet(**values)


def load_obstacles(path, nx, ny):
    """
    Read an obstacle file into a read-only mask.

    Parameters
    ----------
    path : str or Path
        Obstacle file
    nx, ny : int
        Grid dimensions

    Returns
    -------
    mask : ndarray
        Boolean obstacle mask, shape (ny, nx)

    Raises
    ------
    OSError
        If the file cannot be opened
    ValueError
        On malformed lines, out-of-range coordinates or blocked != 1
    """
    cells = []
    try:
        fp = open(path)
    except OSError as e:
        raise OSError(f"could not open input obstacles file: {path}") from e

    with fp:
        for lineno, line in enumerate(fp, start=1):
            fields = line.split()
            if not fields:
                continue
            if len(fields) != 3:
                raise ValueError(
                    f"{path}:{lineno}: expected 3 values per line in obstacle file"
                )
            try:
                xx, yy, blocked = (int(v) for v in fields)
            except ValueError:
                raise ValueError(
                    f"{path}:{lineno}: obstacle values must be integers"
                ) from None

            if xx < 0 or xx > nx - 1:
                raise ValueError(f"{path}:{lineno}: obstacle x-coord out of range")
            if yy < 0 or yy > ny - 1:
                raise ValueError(f"{path}:{lineno}: obstacle y-coord out of range")
            if blocked != 1:
                raise ValueError(f"{path}:{lineno}: obstacle blocked value should be 1")

            cells.append((xx, yy))

    return create_obstacle_mask(nx, ny, cells)


def final_state_table(params, f, obstacles):
    """
    Build the per-cell output table.

    Rows are ordered with y outer and x inner. Obstacle cells report zero
    velocity and the reference pressure ``density * c_s^2``.

    Returns
    -------
    table : ndarray
        Shape (nx * ny, 7): x, y, u_x, u_y, |u|, pressure, obstacle
    """
    obstacles = np.asarray(obstacles, dtype=bool)
    ny, nx = obstacles.shape

    rho, ux, uy = compute_macroscopic(f)
    ux = np.where(obstacles, 0.0, ux)
    uy = np.where(obstacles, 0.0, uy)
    u = compute_velocity_magnitude(ux, uy)
    pressure = np.where(obstacles, params.density * CS2, compute_pressure(rho))

    yy, xx = np.mgrid[0:ny, 0:nx]
    return np.column_stack([
        xx.ravel(), yy.ravel(),
        ux.ravel(), uy.ravel(), u.ravel(),
        pressure.ravel(), obstacles.ravel().astype(int),
    ])


def write_values(params, f, obstacles, av_vels,
                 final_state_path=FINAL_STATE_FILE, av_vels_path=AV_VELS_FILE):
    """
    Write the final state and the average velocity history.

    Parameters
    ----------
    params : ParameterSet
        Run parameters
    f : ndarray
        Final distribution, shape (Q, ny, nx)
    obstacles : ndarray
        Boolean obstacle mask, shape (ny, nx)
    av_vels : array_like
        Average velocity per timestep
    final_state_path, av_vels_path : str or Path
        Output files
    """
    np.savetxt(final_state_path, final_state_table(params, f, obstacles), fmt=FINAL_STATE_FMT)

    av_vels = np.asarray(av_vels, dtype=np.float64)
    history = np.column_stack([np.arange(av_vels.size), av_vels])
    np.savetxt(av_vels_path, history, fmt=AV_VELS_FMT)


def read_final_state(path):
    """Load ``final_state.dat`` as an array of shape (nx * ny, 7)."""
    return np.loadtxt(path, ndmin=2)


def read_av_vels(path):
    """Load ``av_vels.dat`` as (iterations, average velocities)."""
    iters, vels = [], []
    with open(path) as fp:
        for line in fp:
            if not line.strip():
                continue
            idx, value = line.split(":")
            iters.append(int(idx))
            vels.append(float(value))
    return np.array(iters, dtype=int), np.array(vels, dtype=np.float64)
