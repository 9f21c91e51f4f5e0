"""Simulation configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThermalConfig:
    """Configuration for a thermal analysis.

    Attributes:
        ambient: Ambient temperature; added as a baseline to every output
        time_step: Fixed simulation time step in seconds (> 0)
    """
    ambient: float = 318.15
    time_step: float = 1e-3

    def __post_init__(self) -> None:
        if not self.time_step > 0.0:
            raise ValueError(f"time_step must be > 0, got {self.time_step}")
