"""
D2Q9-BGK lattice Boltzmann simulation of 2D flow through an obstacle field.
"""

from .grid import GridState, check_obstacle_mask, create_obstacle_mask
from .params import ParameterSet
from .solver import D2Q9Solver
from .timestep import stream_collide, stream_collide_fast, timestep
from .observables import av_velocity, av_velocity_fast, calc_reynolds
from .fileio import load_obstacles, load_params, write_values

__all__ = [
    "GridState",
    "ParameterSet",
    "D2Q9Solver",
    "check_obstacle_mask",
    "create_obstacle_mask",
    "stream_collide",
    "stream_collide_fast",
    "timestep",
    "av_velocity",
    "av_velocity_fast",
    "calc_reynolds",
    "load_obstacles",
    "load_params",
    "write_values",
]
