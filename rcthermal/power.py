"""Vectorized per-core power waveforms.

Power profiles are stored in columnar (struct-of-arrays) form and evaluated
with numpy, so a trace for many cores and many waveforms can be sampled onto
the simulation time grid cheaply. Three waveform kinds are supported and
summed per core:

- DC: constant power
- Pulse: trapezoidal pulse train (v1, v2, delay, rise, fall, width, period)
- PWL: piecewise-linear points, optionally delayed and periodic

Example usage:
    profiles = PowerProfiles(cores=4)
    profiles.add_dc(0, 0.5)
    profiles.add_pulse(1, v1=0.0, v2=2.0, delay=1e-3, rise=1e-4, fall=1e-4,
                       width=5e-3, period=2e-2)
    profiles.add_pwl(2, [(0.0, 0.0), (0.01, 1.5), (0.02, 0.2)])

    t_array = config.time_step * np.arange(1, steps + 1)
    P = profiles.sample(t_array)          # (steps, cores)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple

import numpy as np


def _empty_float() -> np.ndarray:
    return np.array([], dtype=np.float64)


def _empty_int() -> np.ndarray:
    return np.array([], dtype=np.int32)


@dataclass
class PowerProfiles:
    """Columnar storage of per-core power waveforms (watts).

    Attributes:
        cores: Number of cores

        dc_values: Constant power per core, shape (cores,)

        pulse_*: Columnar arrays for all pulse waveforms
        pwl_*: Packed arrays for all PWL waveforms
    """
    cores: int
    dc_values: np.ndarray = field(default_factory=_empty_float)

    n_pulses: int = 0
    pulse_core_idx: np.ndarray = field(default_factory=_empty_int)
    pulse_v1: np.ndarray = field(default_factory=_empty_float)
    pulse_v2: np.ndarray = field(default_factory=_empty_float)
    pulse_delay: np.ndarray = field(default_factory=_empty_float)
    pulse_rise: np.ndarray = field(default_factory=_empty_float)
    pulse_fall: np.ndarray = field(default_factory=_empty_float)
    pulse_width: np.ndarray = field(default_factory=_empty_float)
    pulse_period: np.ndarray = field(default_factory=_empty_float)

    n_pwls: int = 0
    pwl_core_idx: np.ndarray = field(default_factory=_empty_int)
    pwl_delay: np.ndarray = field(default_factory=_empty_float)
    pwl_period: np.ndarray = field(default_factory=_empty_float)
    pwl_offset: np.ndarray = field(default_factory=_empty_int)
    pwl_count: np.ndarray = field(default_factory=_empty_int)
    pwl_times: np.ndarray = field(default_factory=_empty_float)
    pwl_values: np.ndarray = field(default_factory=_empty_float)

    def __post_init__(self) -> None:
        if self.cores < 1:
            raise ValueError(f"cores must be >= 1, got {self.cores}")
        if self.dc_values.size == 0:
            self.dc_values = np.zeros(self.cores, dtype=np.float64)

    @classmethod
    def from_serialized_dicts(
        cls,
        sources: Dict[int, Dict[str, Any]],
        cores: int,
    ) -> 'PowerProfiles':
        """Create profiles from plain dicts.

        Args:
            sources: Mapping core index -> dict with optional keys
                'dc' (float), 'pulses' (list of dicts with v1, v2, delay,
                rise, fall, width, period) and 'pwls' (list of dicts with
                points, delay, period)
            cores: Number of cores

        Returns:
            PowerProfiles instance
        """
        obj = cls(cores=cores)
        for core, data in sources.items():
            if data.get('dc'):
                obj.add_dc(core, data['dc'])
            for pulse in data.get('pulses', []):
                obj.add_pulse(core, **pulse)
            for pwl in data.get('pwls', []):
                obj.add_pwl(
                    core,
                    pwl['points'],
                    delay=pwl.get('delay', 0.0),
                    period=pwl.get('period', 0.0),
                )
        return obj

    def _check_core(self, core: int) -> int:
        if not 0 <= core < self.cores:
            raise IndexError(f"Core index {core} out of range for {self.cores} cores")
        return int(core)

    def add_dc(self, core: int, watts: float) -> None:
        """Add constant power to a core."""
        self.dc_values[self._check_core(core)] += float(watts)

    def add_pulse(
        self,
        core: int,
        v1: float,
        v2: float,
        delay: float = 0.0,
        rise: float = 0.0,
        fall: float = 0.0,
        width: float = 0.0,
        period: float = 0.0,
    ) -> None:
        """Add a trapezoidal pulse train to a core.

        The waveform sits at v1 until ``delay``, ramps to v2 over ``rise``,
        holds for ``width``, ramps back over ``fall`` and stays at v1. With
        ``period > 0`` the shape repeats.
        """
        idx = self._check_core(core)
        self.pulse_core_idx = np.append(self.pulse_core_idx, np.int32(idx))
        self.pulse_v1 = np.append(self.pulse_v1, float(v1))
        self.pulse_v2 = np.append(self.pulse_v2, float(v2))
        self.pulse_delay = np.append(self.pulse_delay, float(delay))
        self.pulse_rise = np.append(self.pulse_rise, float(rise))
        self.pulse_fall = np.append(self.pulse_fall, float(fall))
        self.pulse_width = np.append(self.pulse_width, float(width))
        self.pulse_period = np.append(self.pulse_period, float(period))
        self.n_pulses += 1

    def add_pwl(
        self,
        core: int,
        points: Sequence[Tuple[float, float]],
        delay: float = 0.0,
        period: float = 0.0,
    ) -> None:
        """Add a piecewise-linear waveform to a core.

        Args:
            core: Core index
            points: (time, watts) pairs with strictly increasing times
            delay: Time shift applied to all points
            period: Repeat period (0 = not periodic; holds the last value)

        Raises:
            ValueError: If points is empty or times are not increasing.
        """
        idx = self._check_core(core)
        if len(points) == 0:
            raise ValueError("PWL waveform needs at least one point")
        times = np.array([p[0] for p in points], dtype=np.float64)
        values = np.array([p[1] for p in points], dtype=np.float64)
        if len(times) > 1 and np.any(np.diff(times) <= 0):
            bad = int(np.argmax(np.diff(times) <= 0))
            raise ValueError(
                f"PWL times not strictly increasing at index {bad + 1}: "
                f"t[{bad}]={times[bad]}, t[{bad + 1}]={times[bad + 1]}"
            )

        self.pwl_core_idx = np.append(self.pwl_core_idx, np.int32(idx))
        self.pwl_delay = np.append(self.pwl_delay, float(delay))
        self.pwl_period = np.append(self.pwl_period, float(period))
        self.pwl_offset = np.append(self.pwl_offset, np.int32(self.pwl_times.size))
        self.pwl_count = np.append(self.pwl_count, np.int32(times.size))
        self.pwl_times = np.concatenate([self.pwl_times, times])
        self.pwl_values = np.concatenate([self.pwl_values, values])
        self.n_pwls += 1

    def evaluate_at_time(self, t: float) -> np.ndarray:
        """Evaluate total power of every core at time t.

        Args:
            t: Time in seconds

        Returns:
            np.ndarray of shape (cores,) in watts
        """
        power = self.dc_values.copy()

        if self.n_pulses > 0:
            np.add.at(power, self.pulse_core_idx, self._evaluate_pulses(t))

        if self.n_pwls > 0:
            np.add.at(power, self.pwl_core_idx, self._evaluate_pwls(t))

        return power

    def sample(self, t_array: np.ndarray) -> np.ndarray:
        """Evaluate all cores on a time grid.

        Args:
            t_array: Sample times in seconds, shape (steps,)

        Returns:
            Power matrix of shape (steps, cores), ready for Analysis.advance().
        """
        t_array = np.asarray(t_array, dtype=np.float64)
        out = np.empty((t_array.size, self.cores), dtype=np.float64)
        for i, t in enumerate(t_array):
            out[i] = self.evaluate_at_time(t)
        return out

    def _evaluate_pulses(self, t: float) -> np.ndarray:
        n = self.n_pulses
        result = np.empty(n, dtype=np.float64)

        period = self.pulse_period
        v1, v2 = self.pulse_v1, self.pulse_v2
        delay = self.pulse_delay
        rt, ft, width = self.pulse_rise, self.pulse_fall, self.pulse_width

        t_rel = t - delay
        # Periodic pulses repeat after the initial delay
        periodic = (period > 0) & (t_rel >= 0)
        t_rel = np.where(periodic, np.mod(t_rel, np.where(period > 0, period, 1.0)), t_rel)

        m_before = t_rel < 0
        m_rise = (~m_before) & (t_rel < rt)
        m_high = (~m_before) & (~m_rise) & (t_rel < rt + width)
        m_fall = (~m_before) & (~m_rise) & (~m_high) & (t_rel < rt + width + ft)
        m_low = (~m_before) & (~m_rise) & (~m_high) & (~m_fall)

        result[m_before] = v1[m_before]

        with np.errstate(divide='ignore', invalid='ignore'):
            rise_frac = np.where(rt > 0, t_rel / rt, 1.0)
        result[m_rise] = v1[m_rise] + (v2[m_rise] - v1[m_rise]) * rise_frac[m_rise]

        result[m_high] = v2[m_high]

        t_fall = t_rel - rt - width
        with np.errstate(divide='ignore', invalid='ignore'):
            fall_frac = np.where(ft > 0, t_fall / ft, 1.0)
        result[m_fall] = v2[m_fall] + (v1[m_fall] - v2[m_fall]) * fall_frac[m_fall]

        result[m_low] = v1[m_low]

        return result

    def _evaluate_pwls(self, t: float) -> np.ndarray:
        result = np.zeros(self.n_pwls, dtype=np.float64)

        for i in range(self.n_pwls):
            offset = self.pwl_offset[i]
            count = self.pwl_count[i]
            times = self.pwl_times[offset:offset + count]
            values = self.pwl_values[offset:offset + count]

            t_adj = t - self.pwl_delay[i]
            if self.pwl_period[i] > 0 and t_adj >= 0:
                t_adj = t_adj % self.pwl_period[i]

            # np.interp clamps to the end values outside the point range
            result[i] = np.interp(t_adj, times, values)

        return result

    def get_statistics(self) -> Dict[str, Any]:
        """Return counts of stored waveforms."""
        return {
            'cores': self.cores,
            'dc_cores': int(np.count_nonzero(self.dc_values)),
            'n_pulses': self.n_pulses,
            'n_pwls': self.n_pwls,
            'n_pwl_points': int(self.pwl_times.size),
        }

