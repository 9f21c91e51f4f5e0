"""Transient temperature analysis of RC thermal networks.

The governing equation of the network is

    C dT/dt + G T = P

with C the diagonal capacitance, G the conductance matrix and P the power
injected into the cores. Substituting T = D x with D = C^(-1/2) gives the
symmetric system

    dx/dt = A x + D P,    A = -D G D

which is diagonalized once, A = U diag(L) U^T. For a fixed time step dt and
power held constant over the step, the exact solution advances by

    x[k+1] = E x[k] + F p[k]
    E = U diag(exp(dt L)) U^T
    F = U diag((exp(dt L) - 1) / L) U^T D

so stepping reduces to dense matrix-vector products: no per-step solve and no
integration error.

Example usage:
    from rcthermal import Analysis, ThermalConfig

    analysis = Analysis(circuit, ThermalConfig(ambient=318.15, time_step=1e-3))
    temperatures = analysis.advance(power)   # (steps, cores)
"""

from __future__ import annotations

import logging
import time as time_module
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .circuit import ThermalCircuit
from .config import ThermalConfig
from .history import HistoryBuffer
from .linear import NumericalError, multiply, symmetric_eigen

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class OperatorSet:
    """Precomputed propagation operators for one circuit/time-step pair.

    All arrays are read-only; one OperatorSet may be shared by any number of
    Analysis instances.

    Attributes:
        cores: Number of powered nodes
        nodes: Number of thermal nodes
        time_step: Time step the operators were built for (seconds)
        ambient: Ambient temperature added to outputs
        D: Symmetrizing scale, 1/sqrt(capacitance), shape (nodes,)
        U: Orthonormal eigenvectors (columns), shape (nodes, nodes)
        L: Eigenvalues, shape (nodes,), non-positive for a stable network
        E: One-step propagation matrix, shape (nodes, nodes)
        F: One-step forcing matrix, shape (nodes, cores)
    """
    cores: int
    nodes: int
    time_step: float
    ambient: float
    D: np.ndarray
    U: np.ndarray
    L: np.ndarray
    E: np.ndarray
    F: np.ndarray

    @classmethod
    def build(cls, circuit: ThermalCircuit, config: ThermalConfig) -> 'OperatorSet':
        """Diagonalize the circuit and precompute E and F.

        Args:
            circuit: Thermal circuit
            config: Ambient temperature and time step

        Returns:
            OperatorSet for the circuit and time step.

        Raises:
            NumericalError: If the eigendecomposition fails.
        """
        t0 = time_module.perf_counter()
        cores, nodes = circuit.cores, circuit.nodes
        dt = config.time_step

        D = 1.0 / np.sqrt(circuit.capacitance)
        A = -1.0 * D[:, None] * D[None, :] * circuit.conductance.T

        L, U = symmetric_eigen(A)

        if np.any(L > 0.0):
            logger.warning(
                f"{int(np.sum(L > 0.0))} positive eigenvalue(s) (max {L.max():.3e}); "
                f"temperatures will grow without bound"
            )

        # E = U diag(exp(dt L)) U^T
        tau = np.exp(dt * L)
        T = tau[:, None] * U.T
        E = np.zeros((nodes, nodes), dtype=np.float64)
        multiply(1.0, U, T, 0.0, E)

        # F = U diag((exp(dt L) - 1) / L) U^T D, first `cores` columns only.
        # A zero mode takes the limit dt.
        with np.errstate(divide='ignore', invalid='ignore'):
            phi = np.where(L == 0.0, dt, np.expm1(dt * L) / L)
        T = phi[:, None] * U.T[:, :cores] * D[None, :cores]
        F = np.zeros((nodes, cores), dtype=np.float64)
        multiply(1.0, U, T, 0.0, F)

        for arr in (D, U, L, E, F):
            arr.flags.writeable = False

        logger.debug(
            f"Built operators for {nodes} nodes / {cores} cores: "
            f"eigenvalues in [{L.min():.3e}, {L.max():.3e}], dt={dt:g}s, "
            f"{(time_module.perf_counter() - t0) * 1000:.2f} ms"
        )

        return cls(
            cores=cores,
            nodes=nodes,
            time_step=dt,
            ambient=float(config.ambient),
            D=D,
            U=U,
            L=L,
            E=E,
            F=F,
        )

    def steady_state(self, power: np.ndarray) -> np.ndarray:
        """Fixed point of the recurrence for constant per-core power.

        Solves x = E x + F p, i.e. x = (I - E)^(-1) F p, in the eigenbasis
        where (I - E) is diagonal.

        Args:
            power: Constant power per core, shape (cores,)

        Returns:
            Core temperatures at steady state, shape (cores,).

        Raises:
            NumericalError: If a mode does not decay (zero or positive
                eigenvalue), so no finite steady state exists.
        """
        p = np.asarray(power, dtype=np.float64).ravel()
        if p.shape[0] != self.cores:
            raise ValueError(f"Expected {self.cores} power values, got {p.shape[0]}")

        # Eigenvalues within rounding of zero count as non-decaying
        tol = 64 * np.finfo(np.float64).eps * max(float(np.max(np.abs(self.L))), 1.0)
        if np.any(self.L > -tol):
            raise NumericalError(
                "network has a non-decaying mode; no finite steady state exists"
            )
        decay = -np.expm1(self.time_step * self.L)

        forcing = self.F @ p
        x = self.U @ ((self.U.T @ forcing) / decay)
        return self.D[:self.cores] * x[:self.cores] + self.ambient


class Analysis:
    """Incremental temperature analysis.

    Each call to step() continues from the state reached by the previous call,
    so a long power trace can be fed window by window.

    Example usage:
        analysis = Analysis(circuit, config)
        Q = np.empty(cores * steps)
        analysis.step(P, Q)          # P, Q flat, core index fastest
    """

    def __init__(
        self,
        circuit: ThermalCircuit,
        config: ThermalConfig,
        growth_factor: float = 1.0,
    ):
        """Set up the analysis for a particular circuit and configuration.

        Args:
            circuit: Thermal circuit
            config: Ambient temperature and time step
            growth_factor: History buffer over-allocation factor on growth

        Raises:
            NumericalError: If the eigendecomposition fails.
        """
        self._attach(OperatorSet.build(circuit, config), growth_factor)

    @classmethod
    def from_operators(cls, operators: OperatorSet, growth_factor: float = 1.0) -> 'Analysis':
        """Create an analysis sharing already-built operators.

        The new instance has its own history, starting from the zero state.
        """
        obj = cls.__new__(cls)
        obj._attach(operators, growth_factor)
        return obj

    def _attach(self, operators: OperatorSet, growth_factor: float) -> None:
        self.logger = logging.getLogger(__name__)
        self.operators = operators
        self._history = HistoryBuffer(operators.nodes, growth_factor=growth_factor)
        self._steps_done = 0

    @property
    def cores(self) -> int:
        return self.operators.cores

    @property
    def nodes(self) -> int:
        return self.operators.nodes

    @property
    def steps_done(self) -> int:
        """Total number of steps advanced since construction or reset()."""
        return self._steps_done

    @property
    def history(self) -> HistoryBuffer:
        return self._history

    @property
    def state(self) -> np.ndarray:
        """Temperature of every node as of the last step, shape (nodes,)."""
        return self.operators.D * self._history.last + self.operators.ambient

    def reset(self) -> None:
        """Return to the initial state (all nodes at ambient)."""
        self._history.reset()
        self._steps_done = 0

    def step(self, P: np.ndarray, Q: np.ndarray) -> None:
        """Advance the analysis over a window of power samples.

        Args:
            P: Flat power vector of length cores * steps; element
                [j * cores + c] is the power of core c during step j
            Q: Flat output vector of the same length, receives temperatures in
                the same layout
        """
        ops = self.operators
        cores, nodes = ops.cores, ops.nodes
        P = np.asarray(P, dtype=np.float64)

        assert P.ndim == 1 and Q.ndim == 1, "P and Q must be flat vectors"
        assert len(P) % cores == 0, "len(P) must be a multiple of cores"
        assert len(Q) % cores == 0, "len(Q) must be a multiple of cores"

        steps = len(P) // cores
        assert steps > 0, "at least one step is required"
        assert len(Q) // cores == steps, "P and Q must cover the same steps"

        history = self._history
        history.prepare(steps + 1)
        S = history.blocks
        assert S.shape == (steps + 1, nodes)

        # Forcing for all steps at once; each step's term is independent.
        multiply(1.0, ops.F, P.reshape(steps, cores).T, 1.0, S[1:].T)

        # Propagation must run in order: block i+1 needs block i final.
        E = ops.E
        for i in range(steps):
            multiply(1.0, E, S[i], 1.0, S[i + 1])

        Q[:] = (ops.D[:cores] * S[1:, :cores] + ops.ambient).ravel()
        self._steps_done += steps

    def advance(self, power: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Advance over a power window given as an array.

        Args:
            power: Power per step and core, shape (steps, cores), or a flat
                vector in step() layout
            out: Optional preallocated output of shape (steps, cores)

        Returns:
            Core temperatures, shape (steps, cores).
        """
        power = np.asarray(power, dtype=np.float64)
        if power.ndim == 2 and power.shape[1] != self.cores:
            raise ValueError(f"Expected {self.cores} columns, got {power.shape[1]}")
        flat = np.ascontiguousarray(power).reshape(-1)
        if flat.size == 0 or flat.size % self.cores != 0:
            raise ValueError(
                f"Power size {flat.size} is not a positive multiple of {self.cores} cores"
            )

        steps = flat.size // self.cores
        if out is None:
            out = np.empty((steps, self.cores), dtype=np.float64)
        elif out.shape != (steps, self.cores) or not out.flags.c_contiguous:
            raise ValueError(f"out must be a C-contiguous ({steps}, {self.cores}) array")

        self.step(flat, out.reshape(-1))
        return out
