"""
D2Q9 Lattice Constants and Utilities

Defines the D2Q9 lattice model for 2D fluid simulations.

All arrays are write-protected: the geometry is built once at import time
and shared by every kernel.
"""
import numpy as np

# D2Q9 lattice velocities
#     6   2   5
#       \ | /
#     3 - 0 - 1
#       / | \
#     7   4   8

# Lattice velocity components
EX = np.array([0, 1, 0, -1, 0, 1, -1, -1, 1], dtype=np.int32)
EY = np.array([0, 0, 1, 0, -1, 1, 1, -1, -1], dtype=np.int32)

# Lattice weights
W0 = 4.0 / 9.0
W1 = 1.0 / 9.0
W2 = 1.0 / 36.0
W = np.array([W0, W1, W1, W1, W1, W2, W2, W2, W2], dtype=np.float64)

# Opposite direction indices (for bounce-back)
OPPOSITE = np.array([0, 3, 4, 1, 2, 7, 8, 5, 6], dtype=np.int32)

# Directions grouped by the sign of their velocity component
EAST = np.array([1, 5, 8], dtype=np.int32)
WEST = np.array([3, 6, 7], dtype=np.int32)
NORTH = np.array([2, 5, 6], dtype=np.int32)
SOUTH = np.array([4, 7, 8], dtype=np.int32)

# Lattice sound speed squared
CS2 = 1.0 / 3.0

# Equilibrium scale factor (1 / CS2)
C = 3.0

# Number of lattice velocities
Q = 9

for _arr in (EX, EY, W, OPPOSITE, EAST, WEST, NORTH, SOUTH):
    _arr.setflags(write=False)
del _arr
