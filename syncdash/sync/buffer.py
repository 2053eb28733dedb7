"""
Bounded history of submitted snapshots.

Keeps the most recent N snapshots in insertion order for diagnostics and
replay. Nothing downstream reads from it to make decisions; its contract
is only the bounded FIFO.
"""

from collections import deque
from typing import Deque, Iterator, List, Optional

from syncdash.logging import get_logger

from .snapshot import StateSnapshot

log = get_logger('delay_buffer')

DEFAULT_CAPACITY = 60  # One second at 60fps


class DelayBuffer:
    """
    Ring of recent snapshots; pushing at capacity evicts the oldest.

    Args:
        capacity: Maximum number of snapshots retained (must be positive)

    Example:
        buffer = DelayBuffer(capacity=3)
        for s in snapshots:
            buffer.push(s)
        assert len(buffer) <= 3
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"DelayBuffer capacity must be positive, got {capacity}")
        self._snapshots: Deque[StateSnapshot] = deque(maxlen=capacity)

        # Statistics
        self._total_pushed = 0
        self._total_evicted = 0

    def push(self, snapshot: StateSnapshot) -> None:
        """Append to the tail, evicting the head if the buffer is full."""
        if len(self._snapshots) == self.capacity:
            evicted = self._snapshots[0]
            self._total_evicted += 1
            log.trace("Evicting snapshot t=%.3f", evicted.timestamp)
        self._snapshots.append(snapshot)
        self._total_pushed += 1

    @property
    def capacity(self) -> int:
        """Maximum number of snapshots that can be stored."""
        return self._snapshots.maxlen or 0

    @property
    def oldest(self) -> Optional[StateSnapshot]:
        """Oldest retained snapshot, or None if empty."""
        if self._snapshots:
            return self._snapshots[0]
        return None

    @property
    def newest(self) -> Optional[StateSnapshot]:
        """Most recently pushed snapshot, or None if empty."""
        if self._snapshots:
            return self._snapshots[-1]
        return None

    @property
    def total_pushed(self) -> int:
        return self._total_pushed

    @property
    def total_evicted(self) -> int:
        return self._total_evicted

    def snapshots(self) -> List[StateSnapshot]:
        """List copy of the retained snapshots, oldest first."""
        return list(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[StateSnapshot]:
        return iter(list(self._snapshots))

    def __repr__(self) -> str:
        return f"DelayBuffer({len(self)}/{self.capacity}, evicted={self._total_evicted})"
