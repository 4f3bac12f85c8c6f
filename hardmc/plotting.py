"""
Built-in plotting utilities for simulation results.

Example:
    >>> from hardmc import simulate, plotting
    >>> result = simulate.npt(params, "run1")
    >>> plotting.block_averages(result, show=False)
    >>> plotting.save("blocks.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .engines import BlockHistoryReporter, RunResult

# Try to import matplotlib, but don't fail if not available
try:
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False
    plt = None


def _check_matplotlib():
    """Check if matplotlib is available."""
    if not HAS_MATPLOTLIB:
        raise ImportError(
            "matplotlib is required for plotting. "
            "Install it with: pip install matplotlib"
        )


def block_averages(
    result: RunResult,
    show: bool = True,
    figsize: tuple[float, float] | None = None,
) -> None:
    """
    Plot the block value of every observable against block number.

    Each panel shows the run average as a dashed line and the standard
    error as a shaded band.

    Args:
        result: RunResult from a simulation.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches.
    """
    _check_matplotlib()

    names = list(result.block_values)
    if figsize is None:
        figsize = (10, 2.5 * len(names))
    fig, axes = plt.subplots(len(names), 1, figsize=figsize, sharex=True, squeeze=False)

    for ax, name in zip(axes[:, 0], names):
        values = result.block_values[name]
        blocks = np.arange(1, len(values) + 1)
        mean = result.statistics.averages[name]
        error = result.statistics.errors[name]

        ax.plot(blocks, values, "bo-", ms=3, lw=0.8)
        ax.axhline(y=mean, color="r", linestyle="--", label=f"Mean = {mean:.4f}")
        ax.axhspan(mean - error, mean + error, alpha=0.2, color="r")
        ax.set_ylabel(name)
        ax.legend(loc="best")
        ax.grid(True, alpha=0.3)

    axes[-1, 0].set_xlabel("Block")
    plt.tight_layout()
    if show:
        plt.show()


def block_history(
    history: BlockHistoryReporter,
    show: bool = True,
    figsize: tuple[float, float] = (10, 4),
) -> None:
    """
    Plot block-end density and nematic order.

    Args:
        history: BlockHistoryReporter attached to the engine during the run.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches.
    """
    _check_matplotlib()

    fig, axes = plt.subplots(1, 2, figsize=figsize)

    ax = axes[0]
    ax.plot(history.blocks, history.density, "b-", lw=1)
    ax.set_xlabel("Block")
    ax.set_ylabel("Density (σ⁻³)")
    ax.set_title("Density")
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(history.blocks, history.nematic_order, "g-", lw=1)
    ax.set_ylim(0.0, 1.0)
    ax.set_xlabel("Block")
    ax.set_ylabel("S")
    ax.set_title("Nematic order")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    if show:
        plt.show()


def save(filename: str | Path, dpi: int = 150) -> None:
    """
    Save the current figure to a file.

    Args:
        filename: Output filename (e.g., "plot.png", "plot.pdf").
        dpi: Resolution in dots per inch.
    """
    _check_matplotlib()
    plt.savefig(filename, dpi=dpi, bbox_inches="tight")
    print(f"Saved plot to {filename}")


def show() -> None:
    """
    Display all pending plots.

    Use this after creating plots with show=False.
    """
    _check_matplotlib()
    plt.show()
