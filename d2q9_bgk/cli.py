"""
Command Line Runner

    d2q9-bgk <paramfile> <obstaclefile>

Loads the run, iterates ``maxIters`` timesteps, prints the Reynolds number
and elapsed times, and writes ``final_state.dat`` and ``av_vels.dat`` into
the working directory.
"""

import argparse
import sys
import time

from .fileio import load_obstacles, load_params, write_values
from .solver import D2Q9Solver


def build_parser():
    parser = argparse.ArgumentParser(
        prog="d2q9-bgk",
        description="Run a D2Q9-BGK lattice Boltzmann simulation",
    )
    parser.add_argument("paramfile", help="input parameter file")
    parser.add_argument("obstaclefile", help="input obstacle file")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # Total/init time starts here
    tot_tic = time.perf_counter()
    init_tic = tot_tic
    try:
        params = load_params(args.paramfile)
        obstacles = load_obstacles(args.obstaclefile, params.nx, params.ny)
        solver = D2Q9Solver(params, obstacles)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Init time stops here, compute time starts
    init_toc = time.perf_counter()
    comp_tic = init_toc

    try:
        solver.run()
    except (FloatingPointError, ValueError) as e:
        print(f"Error at timestep {solver.step_count}: {e}", file=sys.stderr)
        return 1

    comp_toc = time.perf_counter()
    col_tic = comp_toc
    # Nothing to collate in shared memory
    col_toc = time.perf_counter()
    tot_toc = col_toc

    try:
        reynolds = solver.reynolds()
    except (FloatingPointError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("==done==")
    print(f"Reynolds number:\t\t{reynolds:.12E}")
    print(f"Elapsed Init time:\t\t\t{init_toc - init_tic:.6f} (s)")
    print(f"Elapsed Compute time:\t\t\t{comp_toc - comp_tic:.6f} (s)")
    print(f"Elapsed Collate time:\t\t\t{col_toc - col_tic:.6f} (s)")
    print(f"Elapsed Total time:\t\t\t{tot_toc - tot_tic:.6f} (s)")

    try:
        write_values(params, solver.cells.speeds, solver.obstacles, solver.av_vels)
    except OSError as e:
        print(f"Error: could not write output file: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
