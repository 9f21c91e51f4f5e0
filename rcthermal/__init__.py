"""RC thermal network transient simulation package.

Diagonalizes an RC thermal network once and advances core temperatures
exactly, window by window, for arbitrary power traces.
"""

from .linear import NumericalError, symmetric_eigen, multiply
from .config import ThermalConfig
from .circuit import ThermalCircuit, create_circuit_from_graph
from .history import HistoryBuffer
from .analysis import Analysis, OperatorSet
from .power import PowerProfiles
from .simulation import TransientSimulator, TransientResult
from .plotter import ThermalPlotter, plot_core_waveforms, plot_peak_temperatures

__all__ = [
    # Linear algebra
    "NumericalError",
    "symmetric_eigen",
    "multiply",
    # Inputs
    "ThermalConfig",
    "ThermalCircuit",
    "create_circuit_from_graph",
    # Analysis
    "HistoryBuffer",
    "Analysis",
    "OperatorSet",
    # Power profiles
    "PowerProfiles",
    # Transient simulation
    "TransientSimulator",
    "TransientResult",
    # Plotter
    "ThermalPlotter",
    "plot_core_waveforms",
    "plot_peak_temperatures",
]
