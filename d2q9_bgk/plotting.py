"""
Result Visualization

Plots of the files written at the end of a run: the velocity and pressure
fields from ``final_state.dat`` and the average velocity history from
``av_vels.dat``.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .fileio import read_av_vels, read_final_state


def final_state_fields(table):
    """
    Reshape a final-state table into 2D fields.

    Returns
    -------
    fields : dict
        'ux', 'uy', 'u', 'pressure', 'obstacles', each shape (ny, nx)
    """
    nx = int(table[:, 0].max()) + 1
    ny = int(table[:, 1].max()) + 1
    shape = (ny, nx)
    return {
        'ux': table[:, 2].reshape(shape),
        'uy': table[:, 3].reshape(shape),
        'u': table[:, 4].reshape(shape),
        'pressure': table[:, 5].reshape(shape),
        'obstacles': table[:, 6].reshape(shape).astype(bool),
    }


def plot_final_state(final_state_path, save_path=None):
    """
    Plot velocity magnitude and pressure of a final state.

    Parameters
    ----------
    final_state_path : str or Path
        ``final_state.dat`` written by a run
    save_path : str or Path, optional
        Path to save figure

    Returns
    -------
    fig : matplotlib Figure
    """
    fields = final_state_fields(read_final_state(final_state_path))
    solid = np.ma.masked_where(~fields['obstacles'], fields['obstacles'])

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))

    im = ax1.imshow(fields['u'], origin='lower', cmap='viridis', aspect='equal')
    ax1.imshow(solid, origin='lower', cmap='gray', aspect='equal')
    ax1.set_title('Velocity Magnitude |u|', fontsize=12, fontweight='bold')
    plt.colorbar(im, ax=ax1, label='|u|', shrink=0.8)
    ax1.set_xlabel('x')
    ax1.set_ylabel('y')

    im = ax2.imshow(fields['pressure'], origin='lower', cmap='RdYlBu_r', aspect='equal')
    ax2.imshow(solid, origin='lower', cmap='gray', aspect='equal')
    ax2.set_title('Pressure Field', fontsize=12, fontweight='bold')
    plt.colorbar(im, ax=ax2, label='p = ρ/3', shrink=0.8)
    ax2.set_xlabel('x')
    ax2.set_ylabel('y')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight', facecolor='white')

    return fig


def plot_av_velocity(av_vels_path, save_path=None):
    """
    Plot the average velocity against the timestep.

    Parameters
    ----------
    av_vels_path : str or Path
        ``av_vels.dat`` written by a run
    save_path : str or Path, optional
        Path to save figure

    Returns
    -------
    fig : matplotlib Figure
    """
    iters, av_vels = read_av_vels(av_vels_path)

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(iters, av_vels, 'b-', linewidth=1.5)
    ax.set_xlabel('Timestep')
    ax.set_ylabel('Average velocity')
    ax.set_title('Average Velocity History')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
