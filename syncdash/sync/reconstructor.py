"""
Motion Reconstructor - turns delayed snapshots into continuous ghost motion.

The reconstructor is the ghost's receiver. Each delivered snapshot becomes
the new target; each fixed tick moves the ghost body toward it:

- Interpolation mode (hub delay > 0): exponential chase of the target
  position, rotation snapped, jump velocity injected on the rising edge of
  the jump cue only.
- Direct mode (hub delay == 0): body snapped to the target, jump velocity
  injected whenever the target is jumping.

The first delivered snapshot is applied directly, there is nothing
meaningful to interpolate from before it.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, TYPE_CHECKING

from models.primitives import Quaternion, Vector3
from syncdash.logging import get_logger

from .snapshot import StateSnapshot

if TYPE_CHECKING:
    from .hub import SyncHub

log = get_logger('reconstructor')

DEFAULT_INTERPOLATION_RATE = 10.0


class ReconstructorState(Enum):
    """Lifecycle of a reconstructor. TRACKING is terminal."""
    UNINITIALIZED = auto()
    TRACKING = auto()


@dataclass
class GhostBody:
    """
    Applied pose of the ghost.

    Stands in for the physics body the ghost would drive in a game: the
    reconstructor writes position and rotation, and only the vertical
    component of velocity. Horizontal velocity belongs to whatever
    physics integrates the body.
    """
    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    velocity: Vector3 = field(default_factory=Vector3.zero)


@dataclass(frozen=True)
class Pose:
    """Read-only view of the reconstructed pose, for rendering."""
    position: Vector3
    rotation: Quaternion
    velocity: Vector3


class MotionReconstructor:
    """
    Consumer-side state machine for one ghost.

    Args:
        hub: The link the ghost listens on (read for delay and interpolate)
        body: Pose to drive (a fresh GhostBody if omitted)
        interpolation_rate: Chase rate in 1/s; the per-tick blend factor is
            rate * dt clamped to [0, 1]
        on_jump: Optional hook called with the target snapshot whenever a
            vertical velocity override is applied

    Example:
        ghost = MotionReconstructor(hub, interpolation_rate=10.0)
        ghost.attach()

        # Each fixed tick, after hub.pump():
        ghost.tick(dt)
        render(ghost.pose)
    """

    def __init__(
        self,
        hub: 'SyncHub',
        body: Optional[GhostBody] = None,
        interpolation_rate: float = DEFAULT_INTERPOLATION_RATE,
        on_jump: Optional[Callable[[StateSnapshot], None]] = None,
    ):
        self._hub = hub
        self.body = body or GhostBody()
        self.interpolation_rate = interpolation_rate
        self.on_jump = on_jump

        self._state = ReconstructorState.UNINITIALIZED
        self._current: Optional[StateSnapshot] = None
        self._target: Optional[StateSnapshot] = None

        # Statistics
        self._received_count = 0
        self._tick_count = 0
        self._jump_override_count = 0

    def attach(self) -> None:
        """Register as the hub's receiver."""
        self._hub.register_receiver(self.on_snapshot)

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    def on_snapshot(self, snapshot: StateSnapshot) -> None:
        """Receiver callback: adopt snapshot as the new target."""
        self._received_count += 1

        if self._state is ReconstructorState.UNINITIALIZED:
            # Sets current to a copy of the snapshot
            self._apply_directly(snapshot)
            self._state = ReconstructorState.TRACKING
            log.debug("First snapshot received at t=%.3f, tracking", snapshot.timestamp)

        self._target = snapshot

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance the body toward the target by one fixed step."""
        if self._state is not ReconstructorState.TRACKING or self._target is None:
            return

        self._tick_count += 1
        if self.interpolating:
            self._interpolate_toward_target(dt)
        else:
            self._apply_directly(self._target)

    @property
    def interpolating(self) -> bool:
        """True when the link has latency to mask."""
        return self._hub.get_delay() > 0

    def _interpolate_toward_target(self, dt: float) -> None:
        target = self._target
        alpha = max(0.0, min(1.0, self.interpolation_rate * dt))

        # Blend from where the body actually is, not from the last target
        origin = self._current.replace(position=self.body.position)
        blended = self._hub.interpolate(origin, target, alpha)
        self.body.position = blended.position
        self.body.rotation = target.rotation

        if target.is_jumping and not self._current.is_jumping:
            self._override_vertical_velocity(target)

        self._current = target.copy()

    def _apply_directly(self, target: StateSnapshot) -> None:
        self.body.position = target.position
        self.body.rotation = target.rotation

        if target.is_jumping:
            self._override_vertical_velocity(target)

        self._current = target.copy()

    def _override_vertical_velocity(self, target: StateSnapshot) -> None:
        self.body.velocity = self.body.velocity.with_y(target.velocity.y)
        self._jump_override_count += 1
        log.trace("Jump override vy=%.3f", target.velocity.y)
        if self.on_jump is not None:
            self.on_jump(target)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ReconstructorState:
        return self._state

    @property
    def has_received_first(self) -> bool:
        return self._state is ReconstructorState.TRACKING

    @property
    def current(self) -> Optional[StateSnapshot]:
        """Last applied snapshot (a private copy)."""
        return self._current

    @property
    def target(self) -> Optional[StateSnapshot]:
        """Most recently delivered snapshot."""
        return self._target

    @property
    def pose(self) -> Pose:
        return Pose(
            position=self.body.position,
            rotation=self.body.rotation,
            velocity=self.body.velocity,
        )

    @property
    def received_count(self) -> int:
        return self._received_count

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def jump_override_count(self) -> int:
        return self._jump_override_count
