"""
Sync Hub - the simulated network link between runner and ghost.

Producers submit raw samples; the hub wraps them in snapshots, keeps a
bounded history and schedules each for delivery after the configured
latency. Consumers register a single receiver and read delivered snapshots.

One hub is constructed per session and passed explicitly to both sides.
"""

from typing import Any, Dict, Optional, Union

from models.primitives import Quaternion, Vector3
from models.sync import SyncConfig, clamp_delay
from syncdash.clock import Clock, MonotonicClock
from syncdash.logging import get_logger

from .buffer import DelayBuffer
from .logger import NullTraceLogger, SyncTraceLogger
from .scheduler import DeliveryScheduler, Receiver
from .snapshot import StateSnapshot

log = get_logger('sync_hub')


class SyncHub:
    """
    Facade over DelayBuffer + DeliveryScheduler.

    Args:
        config: Synchronization settings (delay, buffer size, interpolation)
        clock: Session time source
        trace: Optional structured trace logger

    Example:
        hub = SyncHub(SyncConfig(delay=0.1), clock)
        hub.register_receiver(ghost.on_snapshot)

        # Producer, each fixed step:
        hub.submit(position, velocity, is_jumping, score)

        # Consumer side, each fixed step:
        hub.pump()
    """

    def __init__(
        self,
        config: Optional[SyncConfig] = None,
        clock: Optional[Clock] = None,
        trace: Union[SyncTraceLogger, NullTraceLogger, None] = None,
    ):
        if clock is None:
            clock = MonotonicClock()

        self.config = config or SyncConfig()
        self.clock = clock
        self.trace = trace or NullTraceLogger()

        self.buffer = DelayBuffer(self.config.buffer_capacity)
        self.scheduler = DeliveryScheduler(clock)

        self._delay = clamp_delay(self.config.delay)
        self._interpolation_enabled = self.config.interpolation_enabled

    # -------------------------------------------------------------------------
    # Consumer side
    # -------------------------------------------------------------------------

    def register_receiver(self, callback: Optional[Receiver]) -> None:
        """Install the single receiver, replacing any previous one.

        Snapshots already in flight go to whichever receiver is registered
        when they fire. Passing None unregisters (later deliveries drop).
        """
        if self.scheduler.receiver is not None and callback is not None:
            log.debug("Replacing registered receiver")
        self.scheduler.receiver = callback

    @property
    def receiver(self) -> Optional[Receiver]:
        return self.scheduler.receiver

    def pump(self) -> list:
        """Fire all deliveries that are due. Call once per tick.

        Returns:
            Fired ScheduledDelivery entries (delivered or dropped)
        """
        fired = self.scheduler.poll()
        for entry in fired:
            self.trace.log_delivery(entry)
        return fired

    # -------------------------------------------------------------------------
    # Producer side
    # -------------------------------------------------------------------------

    def submit(
        self,
        position: Vector3,
        velocity: Vector3,
        is_jumping: bool,
        score: int,
    ) -> StateSnapshot:
        """Send one sample over the simulated link.

        Rotation is not captured by the producer and is always identity.

        Returns:
            The snapshot that was buffered and scheduled
        """
        snapshot = StateSnapshot(
            position=position,
            rotation=Quaternion.identity(),
            velocity=velocity,
            is_jumping=is_jumping,
            timestamp=self.clock.now(),
            score=score,
        )
        self.buffer.push(snapshot)
        self.scheduler.schedule(snapshot, self._delay)
        self.trace.log_submit(snapshot, self._delay)
        return snapshot

    # -------------------------------------------------------------------------
    # Interpolation
    # -------------------------------------------------------------------------

    def interpolate(
        self,
        from_state: StateSnapshot,
        to_state: StateSnapshot,
        t: float,
    ) -> StateSnapshot:
        """Blend two snapshots.

        Position, velocity and timestamp blend linearly, rotation blends
        spherically. is_jumping and score always come from to_state. With
        interpolation disabled, to_state is returned unchanged.

        t is expected in [0, 1] but is not clamped here.
        """
        if not self._interpolation_enabled:
            return to_state

        return interpolate_snapshots(from_state, to_state, t)

    @property
    def interpolation_enabled(self) -> bool:
        return self._interpolation_enabled

    @interpolation_enabled.setter
    def interpolation_enabled(self, enabled: bool) -> None:
        self._interpolation_enabled = bool(enabled)

    # -------------------------------------------------------------------------
    # Delay
    # -------------------------------------------------------------------------

    def get_delay(self) -> float:
        """Current simulated latency in seconds."""
        return self._delay

    def set_delay(self, delay: float) -> None:
        """Change the latency for subsequent submissions (clamped to [0, 1])."""
        applied = clamp_delay(delay)
        if applied != delay:
            log.warning("Delay %.3f out of range, clamped to %.3f", delay, applied)
        if applied != self._delay:
            log.info("Network delay %.3f -> %.3f", self._delay, applied)
        self._delay = applied
        self.trace.log_delay_change(delay, applied)

    delay = property(get_delay, set_delay)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        """Counters for the link."""
        return {
            "delay": self._delay,
            "interpolation_enabled": self._interpolation_enabled,
            "buffered": len(self.buffer),
            "buffer_capacity": self.buffer.capacity,
            "submitted": self.scheduler.scheduled_count,
            "in_flight": self.scheduler.pending_count,
            "delivered": self.scheduler.delivered_count,
            "dropped": self.scheduler.dropped_count,
        }


def interpolate_snapshots(
    from_state: StateSnapshot,
    to_state: StateSnapshot,
    t: float,
) -> StateSnapshot:
    """Unconditional snapshot blend (see SyncHub.interpolate)."""
    return StateSnapshot(
        position=from_state.position.lerp(to_state.position, t),
        rotation=from_state.rotation.slerp(to_state.rotation, t),
        velocity=from_state.velocity.lerp(to_state.velocity, t),
        is_jumping=to_state.is_jumping,  # Latest wins
        timestamp=from_state.timestamp + (to_state.timestamp - from_state.timestamp) * t,
        score=to_state.score,
    )
