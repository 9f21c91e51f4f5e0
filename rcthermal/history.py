"""Growable temperature-history buffer for incremental stepping.

The buffer holds a sequence of state blocks, each of length ``nodes``. Block 0
is the state carried over from the previous call; blocks 1..steps receive the
states computed by the current call. Storage is a single contiguous numpy array
of shape (capacity, nodes) with the logical block count tracked separately, so
a later call that needs no more blocks than an earlier one reuses the
allocation instead of reallocating.
"""

from __future__ import annotations

import logging
import math

import numpy as np


class HistoryBuffer:
    """Owned block storage with explicit logical length.

    Example:
        buf = HistoryBuffer(nodes=4)
        buf.prepare(required=11)     # block 0 = last state, blocks 1..10 zeroed
        window = buf.blocks[1:]      # accumulate into these
    """

    def __init__(self, nodes: int, growth_factor: float = 1.0):
        """Initialize with a single all-zero block.

        Args:
            nodes: Block length (number of thermal nodes)
            growth_factor: Capacity multiplier applied on reallocation. 1.0
                allocates exactly what is required; larger values over-allocate
                so that later calls can reuse capacity.
        """
        if nodes < 1:
            raise ValueError(f"nodes must be >= 1, got {nodes}")
        if growth_factor < 1.0:
            raise ValueError(f"growth_factor must be >= 1.0, got {growth_factor}")
        self.logger = logging.getLogger(__name__)
        self._nodes = int(nodes)
        self._growth_factor = float(growth_factor)
        self._data = np.zeros((1, self._nodes), dtype=np.float64)
        self._length = 1
        self.reallocations = 0

    @property
    def nodes(self) -> int:
        return self._nodes

    @property
    def capacity(self) -> int:
        """Allocated number of blocks."""
        return self._data.shape[0]

    @property
    def length(self) -> int:
        """Logical number of blocks."""
        return self._length

    @property
    def blocks(self) -> np.ndarray:
        """View of the logical blocks, shape (length, nodes)."""
        return self._data[:self._length]

    @property
    def last(self) -> np.ndarray:
        """View of the most recent block."""
        return self._data[self._length - 1]

    def ensure_capacity(self, required: int) -> bool:
        """Reallocate if fewer than ``required`` blocks are allocated.

        The new storage receives the preserved last block at position 0 and
        zeros elsewhere; the logical length becomes ``required``.

        Args:
            required: Number of blocks needed (>= 1)

        Returns:
            True if a reallocation happened, False if capacity already sufficed
            (in which case nothing is modified).
        """
        if self.capacity >= required:
            return False

        new_capacity = max(required, int(math.ceil(self.capacity * self._growth_factor)))
        data = np.zeros((new_capacity, self._nodes), dtype=np.float64)
        data[0] = self._data[self._length - 1]

        self.logger.debug(
            f"History buffer grown from {self.capacity} to {new_capacity} blocks "
            f"({new_capacity * self._nodes * 8} bytes)"
        )
        self._data = data
        self._length = required
        self.reallocations += 1
        return True

    def advance_window(self, required: int) -> None:
        """Reuse existing capacity for a new window of ``required`` blocks.

        Moves the last logical block to position 0 and zero-fills blocks
        [1, required), which the next step accumulates into.

        Args:
            required: Number of blocks needed (1 <= required <= capacity)
        """
        assert 1 <= required <= self.capacity, "window exceeds allocated capacity"
        last = self._length - 1
        if last != 0:
            self._data[0] = self._data[last]
        self._data[1:required] = 0.0
        self._length = required

    def prepare(self, required: int) -> None:
        """Set up ``required`` blocks, carrying the last state into block 0."""
        if not self.ensure_capacity(required):
            self.advance_window(required)

    def reset(self) -> None:
        """Discard history and return to a single zero block."""
        self._data[0] = 0.0
        self._length = 1

    def memory_bytes(self) -> int:
        """Allocated storage in bytes."""
        return self._data.nbytes
