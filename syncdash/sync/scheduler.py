"""
Delivery Scheduler - per-snapshot fire-once timers.

Every scheduled snapshot gets its own timer, the way every packet on a real
link has its own latency. The delay is read when the snapshot is scheduled,
so changing the configured latency only affects later sends. The receiver
is read when the timer fires, so rebinding it affects snapshots already in
flight.

Deliveries are drained cooperatively: the owner calls poll() once per tick
and every entry whose ready time has passed is handed to the receiver, in
ready-time order, on the caller's thread.
"""

import heapq
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from syncdash.clock import Clock
from syncdash.logging import get_logger

from .snapshot import StateSnapshot

log = get_logger('scheduler')

Receiver = Callable[[StateSnapshot], None]

# Ready times within this of the clock count as reached. Summed float
# timesteps drift by a few ulps, which would otherwise push a delivery
# one whole tick late.
TIME_EPSILON = 1e-9


@dataclass
class ScheduledDelivery:
    """A snapshot waiting for its delay to elapse."""
    ready_at: float
    sequence: int  # Tie-break: equal ready times fire in submission order
    snapshot: StateSnapshot
    scheduled_at: float

    # Filled in when the entry fires
    fired_at: Optional[float] = None
    received: bool = False

    @property
    def latency(self) -> Optional[float]:
        """Time between scheduling and firing, once fired."""
        if self.fired_at is None:
            return None
        return self.fired_at - self.scheduled_at


class DeliveryScheduler:
    """
    Holds in-flight snapshots and fires each exactly once.

    The scheduler trusts its caller: delay is not validated here (the hub
    clamps it at the configuration boundary).

    Args:
        clock: Time source used for both scheduling and firing
        receiver: Initial receiver, may be None

    Example:
        scheduler = DeliveryScheduler(clock)
        scheduler.receiver = ghost.on_snapshot
        scheduler.schedule(snapshot, delay=0.1)

        # Each tick:
        scheduler.poll()
    """

    def __init__(self, clock: Clock, receiver: Optional[Receiver] = None):
        self._clock = clock
        self.receiver: Optional[Receiver] = receiver
        self._heap: List[Tuple[float, int, ScheduledDelivery]] = []
        self._sequence = 0

        # Statistics
        self._scheduled_count = 0
        self._delivered_count = 0
        self._dropped_count = 0

    def schedule(self, snapshot: StateSnapshot, delay: float) -> ScheduledDelivery:
        """Arrange one delivery of snapshot no earlier than delay from now.

        Args:
            snapshot: Snapshot to deliver
            delay: Seconds to wait, read now and never re-read

        Returns:
            The pending entry (for inspection; there is no cancellation)
        """
        now = self._clock.now()
        entry = ScheduledDelivery(
            ready_at=now + delay,
            sequence=self._sequence,
            snapshot=snapshot,
            scheduled_at=now,
        )
        self._sequence += 1
        heapq.heappush(self._heap, (entry.ready_at, entry.sequence, entry))
        self._scheduled_count += 1
        log.trace("Scheduled snapshot t=%.3f ready_at=%.3f", snapshot.timestamp, entry.ready_at)
        return entry

    def poll(self) -> List[ScheduledDelivery]:
        """Fire every entry whose ready time has been reached.

        A ready time within TIME_EPSILON of the current time counts as
        reached.

        Each entry is removed before its receiver runs, so an exception from
        the receiver propagates without the entry ever firing twice.

        Returns:
            Fired entries in firing order, including dropped ones
        """
        now = self._clock.now()
        fired: List[ScheduledDelivery] = []

        while self._heap and self._heap[0][0] <= now + TIME_EPSILON:
            _, _, entry = heapq.heappop(self._heap)
            entry.fired_at = now
            fired.append(entry)

            receiver = self.receiver  # Late-bound: whoever is registered now
            if receiver is None:
                self._dropped_count += 1
                log.debug("No receiver registered, dropping snapshot t=%.3f",
                          entry.snapshot.timestamp)
                continue

            entry.received = True
            self._delivered_count += 1
            receiver(entry.snapshot.copy())

        return fired

    @property
    def pending_count(self) -> int:
        """Number of snapshots still in flight."""
        return len(self._heap)

    @property
    def next_ready_at(self) -> Optional[float]:
        """Ready time of the next delivery, or None if nothing is pending."""
        if self._heap:
            return self._heap[0][0]
        return None

    @property
    def scheduled_count(self) -> int:
        return self._scheduled_count

    @property
    def delivered_count(self) -> int:
        return self._delivered_count

    @property
    def dropped_count(self) -> int:
        return self._dropped_count
