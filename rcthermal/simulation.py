"""Windowed transient thermal simulation.

Drives an Analysis over a time span, feeding power window by window the way an
online caller would, and collects per-core temperature waveforms together with
peak statistics.

Example usage:
    from rcthermal import TransientSimulator, PowerProfiles

    sim = TransientSimulator(circuit, config)
    result = sim.solve_transient(profiles, t_end=1.0)

    print(f"Peak temperature: {result.peak_temperature:.2f} on core {result.peak_core}")
"""

from __future__ import annotations

import logging
import math
import time as time_module
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .analysis import Analysis, OperatorSet
from .circuit import ThermalCircuit
from .config import ThermalConfig
from .power import PowerProfiles


@dataclass
class TransientResult:
    """Result of a transient thermal simulation.

    Row k of ``temperatures`` and ``power`` corresponds to ``t_array[k]``, the
    end of step k.
    """
    t_array: np.ndarray                          # Time at the end of each step
    temperatures: np.ndarray                     # (steps, cores)
    power: np.ndarray                            # (steps, cores), watts
    core_names: List[Any]                        # Column labels
    ambient: float                               # Baseline temperature
    time_step: float                             # Step length (seconds)
    peak_temperature: float                      # Max over all cores/times
    peak_time: float                             # Time of the peak
    peak_core: Any                               # Core reaching the peak
    peak_per_core: Dict[Any, float]              # Max temperature of each core
    hottest_cores: List[Tuple[Any, float, float]]  # (core, peak, time), top N
    timings: Dict[str, float]                    # Timing breakdown

    def get_waveform(self, core: Any) -> np.ndarray:
        """Get temperature waveform for a core.

        Args:
            core: Core name

        Returns:
            Array of temperatures at each time point.

        Raises:
            KeyError: If core is unknown.
        """
        try:
            idx = self.core_names.index(core)
        except ValueError:
            raise KeyError(f"Core {core} not in result") from None
        return self.temperatures[:, idx]

    def summary(self) -> Dict[str, Any]:
        """Return basic summary stats."""
        return {
            'steps': int(self.t_array.size),
            'cores': len(self.core_names),
            'ambient': self.ambient,
            'peak_temperature': self.peak_temperature,
            'peak_time': self.peak_time,
            'peak_core': self.peak_core,
            'final_max_temperature': float(self.temperatures[-1].max()),
            'mean_temperature': float(self.temperatures.mean()),
            'total_energy': float(self.power.sum() * self.time_step),
        }


class TransientSimulator:
    """Transient simulator over a fixed time grid.

    Operators are built once at construction. Each call to solve_transient()
    starts from ambient; continue_transient() resumes from where the last call stopped.
    """

    def __init__(
        self,
        circuit: ThermalCircuit,
        config: ThermalConfig,
        core_names: Optional[Sequence[Any]] = None,
        window: int = 64,
        growth_factor: float = 1.0,
    ):
        """Initialize simulator.

        Args:
            circuit: Thermal circuit
            config: Ambient temperature and time step
            core_names: Labels for cores (default: circuit.core_names)
            window: Steps passed to the analysis per call
            growth_factor: History buffer over-allocation factor
        """
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.logger = logging.getLogger(__name__)
        self.circuit = circuit
        self.config = config
        self.window = int(window)

        names = list(core_names) if core_names is not None else circuit.core_names
        if len(names) != circuit.cores:
            raise ValueError(f"Expected {circuit.cores} core names, got {len(names)}")
        self.core_names = names

        t0 = time_module.perf_counter()
        self.operators = OperatorSet.build(circuit, config)
        self._build_time = time_module.perf_counter() - t0

        self.analysis = Analysis.from_operators(self.operators, growth_factor=growth_factor)
        self._t_current = 0.0

        self.logger.info(
            f"Initialized transient simulator: {circuit.nodes} nodes, "
            f"{circuit.cores} cores, dt={config.time_step:g}s"
        )

    @property
    def time(self) -> float:
        """Simulated time reached so far (seconds)."""
        return self._t_current

    def solve_transient(
        self,
        profiles: PowerProfiles,
        t_end: float,
        t_start: float = 0.0,
        verbose: bool = False,
        n_hottest: int = 5,
    ) -> TransientResult:
        """Run a transient simulation from ambient.

        Power for step k is sampled at the end of the step,
        t_start + (k + 1) * dt, and held over the step.

        Args:
            profiles: Per-core power waveforms
            t_end: End time in seconds
            t_start: Start time in seconds
            verbose: Log progress at INFO instead of DEBUG
            n_hottest: Number of hottest cores to report

        Returns:
            TransientResult with waveforms, peaks and timing.
        """
        self.analysis.reset()
        self._t_current = t_start
        return self.continue_transient(profiles, t_end, verbose=verbose, n_hottest=n_hottest)

    def continue_transient(
        self,
        profiles: PowerProfiles,
        t_end: float,
        verbose: bool = False,
        n_hottest: int = 5,
    ) -> TransientResult:
        """Continue the simulation from the current time up to t_end."""
        if profiles.cores != self.circuit.cores:
            raise ValueError(
                f"Profiles cover {profiles.cores} cores, circuit has {self.circuit.cores}"
            )

        timings: Dict[str, float] = {'build_operators': self._build_time}
        t0_total = time_module.perf_counter()

        dt = self.config.time_step
        t_begin = self._t_current
        n_steps = int(math.ceil((t_end - t_begin) / dt - 1e-9))
        if n_steps < 1:
            raise ValueError(f"t_end={t_end} must be after current time {t_begin}")

        t_array = t_begin + dt * np.arange(1, n_steps + 1)

        t0_sample = time_module.perf_counter()
        power = profiles.sample(t_array)
        timings['sample_power'] = time_module.perf_counter() - t0_sample

        self.logger.debug(f"Power profiles: {profiles.get_statistics()}")

        temperatures = np.empty((n_steps, self.circuit.cores), dtype=np.float64)
        level = logging.INFO if verbose else logging.DEBUG

        t0_step = time_module.perf_counter()
        n_windows = int(math.ceil(n_steps / self.window))
        for w, start in enumerate(range(0, n_steps, self.window)):
            stop = min(start + self.window, n_steps)
            self.analysis.advance(power[start:stop], out=temperatures[start:stop])
            if w % max(1, n_windows // 10) == 0:
                self.logger.log(
                    level,
                    f"  Window {w + 1}/{n_windows} (t={t_array[stop - 1]:.4g}s, "
                    f"max T={temperatures[start:stop].max():.3f})"
                )
        timings['time_stepping'] = time_module.perf_counter() - t0_step

        self._t_current = float(t_array[-1])

        result = self._build_result(t_array, temperatures, power, n_hottest, timings)
        timings['total'] = time_module.perf_counter() - t0_total
        return result

    def _build_result(
        self,
        t_array: np.ndarray,
        temperatures: np.ndarray,
        power: np.ndarray,
        n_hottest: int,
        timings: Dict[str, float],
    ) -> TransientResult:
        peak_idx = np.argmax(temperatures, axis=0)
        peak_vals = temperatures[peak_idx, np.arange(temperatures.shape[1])]

        peak_per_core: Dict[Any, float] = {}
        core_peaks: List[Tuple[Any, float, float]] = []
        for c, name in enumerate(self.core_names):
            peak_per_core[name] = float(peak_vals[c])
            core_peaks.append((name, float(peak_vals[c]), float(t_array[peak_idx[c]])))

        hottest = sorted(core_peaks, key=lambda x: x[1], reverse=True)[:n_hottest]
        global_core = int(np.argmax(peak_vals))

        return TransientResult(
            t_array=t_array,
            temperatures=temperatures,
            power=power,
            core_names=list(self.core_names),
            ambient=self.config.ambient,
            time_step=self.config.time_step,
            peak_temperature=float(peak_vals[global_core]),
            peak_time=float(t_array[peak_idx[global_core]]),
            peak_core=self.core_names[global_core],
            peak_per_core=peak_per_core,
            hottest_cores=hottest,
            timings=timings,
        )

    def steady_state(self, profiles: PowerProfiles, t: float = 0.0) -> Dict[Any, float]:
        """Steady-state core temperatures for the power drawn at time t."""
        temps = self.operators.steady_state(profiles.evaluate_at_time(t))
        return {name: float(temps[c]) for c, name in enumerate(self.core_names)}
