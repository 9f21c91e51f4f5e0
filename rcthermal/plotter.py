"""Plotting utilities for transient thermal results.

Provides core temperature waveform plots and per-core peak temperature bar
charts.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from .simulation import TransientResult

# Use non-interactive backend by default
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure


class ThermalPlotter:
    """Plotting utilities for TransientResult.

    Example:
        from rcthermal import ThermalPlotter

        result = simulator.solve_transient(profiles, t_end=1.0)
        ThermalPlotter.plot_core_waveforms(result, save_path='cores.png')
        ThermalPlotter.plot_peak_temperatures(result, save_path='peaks.png')
    """

    @staticmethod
    def plot_core_waveforms(
        result: TransientResult,
        cores: Optional[Sequence[Any]] = None,
        ax: Optional[Axes] = None,
        title: str = "Core Temperatures",
        show: bool = False,
        save_path: Optional[str] = None,
        time_scale: float = 1e3,
        time_label: str = "ms",
        relative: bool = False,
    ) -> Tuple[Figure, Axes]:
        """Plot temperature waveforms of selected cores.

        Args:
            result: TransientResult
            cores: Cores to plot (default: all)
            ax: Matplotlib axes (created if None)
            title: Plot title
            show: Whether to display the plot
            save_path: Path to save figure (None = don't save)
            time_scale: Scale factor for time axis
            time_label: Unit label for time axis
            relative: Plot rise above ambient instead of absolute temperature

        Returns:
            (fig, ax) matplotlib objects
        """
        if cores is None:
            cores = result.core_names
        cores = [c for c in cores if c in result.core_names]
        if not cores:
            raise ValueError("None of the requested cores are in the result")

        if ax is None:
            fig, ax = plt.subplots(figsize=(10, 5))
        else:
            fig = ax.figure

        t_scaled = result.t_array * time_scale
        offset = result.ambient if relative else 0.0

        for core in cores:
            data = result.get_waveform(core) - offset
            label = str(core) if len(str(core)) < 30 else str(core)[:27] + '...'
            ax.plot(t_scaled, data, linewidth=1.0, label=label)

        ax.set_xlabel(f'Time ({time_label})')
        ax.set_ylabel('Temperature rise' if relative else 'Temperature')
        ax.set_title(title)
        ax.grid(True, alpha=0.3)

        if len(cores) <= 10:
            ax.legend(loc='best', fontsize='small')

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig, ax

    @staticmethod
    def plot_peak_temperatures(
        result: TransientResult,
        ax: Optional[Axes] = None,
        title: str = "Peak Core Temperatures",
        show: bool = False,
        save_path: Optional[str] = None,
        color: str = 'tab:red',
    ) -> Tuple[Figure, Axes]:
        """Bar chart of each core's peak temperature rise above ambient.

        Returns:
            (fig, ax) matplotlib objects
        """
        names: List[Any] = list(result.peak_per_core.keys())
        rises = np.array([result.peak_per_core[n] for n in names]) - result.ambient

        if ax is None:
            fig, ax = plt.subplots(figsize=(max(6, 0.4 * len(names)), 4))
        else:
            fig = ax.figure

        positions = np.arange(len(names))
        ax.bar(positions, rises, color=color)
        ax.set_xticks(positions)
        ax.set_xticklabels([str(n) for n in names], rotation=90 if len(names) > 12 else 0)
        ax.set_ylabel('Peak rise above ambient')
        ax.set_title(title)
        ax.grid(True, axis='y', alpha=0.3)

        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig, ax


def plot_core_waveforms(result: TransientResult, **kwargs) -> Tuple[Figure, Axes]:
    """Convenience function for ThermalPlotter.plot_core_waveforms."""
    return ThermalPlotter.plot_core_waveforms(result, **kwargs)


def plot_peak_temperatures(result: TransientResult, **kwargs) -> Tuple[Figure, Axes]:
    """Convenience function for ThermalPlotter.plot_peak_temperatures."""
    return ThermalPlotter.plot_peak_temperatures(result, **kwargs)
