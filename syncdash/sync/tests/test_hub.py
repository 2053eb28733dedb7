"""
Unit tests for the SyncHub facade: submission, delay and interpolation.
"""

import math

import pytest

from models.primitives import Quaternion, Vector3
from models.sync import SyncConfig
from syncdash.clock import ManualClock
from syncdash.sync import StateSnapshot, SyncHub


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def hub(clock):
    return SyncHub(SyncConfig(delay=0.1, buffer_capacity=5), clock)


@pytest.fixture
def received(hub):
    """Register a list-appending receiver and return the list."""
    items = []
    hub.register_receiver(items.append)
    return items


@pytest.fixture
def state_a():
    return StateSnapshot(
        position=Vector3(x=0.0, y=0.0, z=0.0),
        rotation=Quaternion.identity(),
        velocity=Vector3(x=0.0, y=0.0, z=4.0),
        is_jumping=False,
        timestamp=1.0,
        score=10,
    )


@pytest.fixture
def state_b():
    return StateSnapshot(
        position=Vector3(x=2.0, y=4.0, z=10.0),
        rotation=Quaternion.from_axis_angle(Vector3(y=1.0), math.pi / 2),
        velocity=Vector3(x=0.0, y=8.0, z=6.0),
        is_jumping=True,
        timestamp=2.0,
        score=12,
    )


def submit(hub, score, z=0.0, jumping=False):
    return hub.submit(Vector3(z=z), Vector3(z=5.0), jumping, score)


# =============================================================================
# Submission
# =============================================================================

class TestSubmit:
    """Tests for SyncHub.submit."""

    def test_snapshot_fields(self, clock, hub):
        clock.set(0.5)

        snapshot = hub.submit(Vector3(x=1.0, y=2.0, z=3.0), Vector3(z=5.0), True, 42)

        assert snapshot.position == Vector3(x=1.0, y=2.0, z=3.0)
        assert snapshot.velocity == Vector3(z=5.0)
        assert snapshot.is_jumping is True
        assert snapshot.score == 42
        assert snapshot.timestamp == 0.5
        assert snapshot.rotation == Quaternion.identity()

    def test_submit_buffers_and_schedules(self, hub):
        snapshot = submit(hub, 1)

        assert hub.buffer.newest is snapshot
        assert hub.scheduler.pending_count == 1

    def test_buffer_is_bounded_by_config(self, hub):
        for score in range(8):
            submit(hub, score)

        assert len(hub.buffer) == 5
        assert [s.score for s in hub.buffer] == [3, 4, 5, 6, 7]

    def test_delivery_after_delay(self, clock, hub, received):
        submit(hub, 1)

        clock.set(0.05)
        hub.pump()
        assert received == []

        clock.set(0.1)
        hub.pump()
        assert [s.score for s in received] == [1]

    def test_buffered_and_delivered_copies_do_not_alias(self, clock, hub, received):
        snapshot = submit(hub, 1)

        clock.set(0.1)
        hub.pump()

        assert received[0] == snapshot
        assert received[0] is not hub.buffer.newest

    def test_stats(self, clock, hub, received):
        submit(hub, 1)
        submit(hub, 2)
        clock.set(0.1)
        hub.pump()
        submit(hub, 3)

        stats = hub.stats()

        assert stats["submitted"] == 3
        assert stats["delivered"] == 2
        assert stats["in_flight"] == 1
        assert stats["dropped"] == 0
        assert stats["buffered"] == 3
        assert stats["buffer_capacity"] == 5


# =============================================================================
# Receiver
# =============================================================================

class TestReceiver:
    """Single-slot, last-writer-wins receiver."""

    def test_register_replaces_previous(self, clock, hub):
        first, second = [], []
        hub.register_receiver(first.append)
        hub.register_receiver(second.append)

        submit(hub, 1)
        clock.set(0.1)
        hub.pump()

        assert first == []
        assert [s.score for s in second] == [1]

    def test_receiver_bound_at_fire_time(self, clock, hub):
        early, late = [], []
        hub.register_receiver(early.append)
        submit(hub, 1)

        hub.register_receiver(late.append)
        clock.set(0.1)
        hub.pump()

        assert early == []
        assert [s.score for s in late] == [1]

    def test_no_receiver_is_silent_drop(self, clock, hub):
        submit(hub, 1)
        clock.set(0.1)

        fired = hub.pump()

        assert len(fired) == 1
        assert hub.stats()["dropped"] == 1

    def test_unregister(self, clock, hub, received):
        hub.register_receiver(None)
        submit(hub, 1)
        clock.set(0.1)
        hub.pump()

        assert received == []
        assert hub.receiver is None


# =============================================================================
# Delay
# =============================================================================

class TestDelay:
    """Delay accessors and clamping."""

    def test_default_delay(self, clock):
        assert SyncHub(clock=clock).get_delay() == pytest.approx(0.1)

    def test_set_delay(self, hub):
        hub.set_delay(0.25)

        assert hub.get_delay() == 0.25
        assert hub.delay == 0.25

    @pytest.mark.parametrize("requested,applied", [(-0.5, 0.0), (1.5, 1.0), (0.0, 0.0), (1.0, 1.0)])
    def test_set_delay_clamps(self, hub, requested, applied):
        hub.set_delay(requested)

        assert hub.get_delay() == applied

    def test_property_setter_clamps(self, hub):
        hub.delay = 7.0

        assert hub.delay == 1.0

    def test_config_delay_clamped(self, clock):
        hub = SyncHub(SyncConfig(delay=4.0), clock)

        assert hub.get_delay() == 1.0

    def test_delay_read_at_submit_time(self, clock, hub, received):
        submit(hub, 1)            # ready at 0.1
        hub.set_delay(0.5)
        submit(hub, 2)            # ready at 0.5

        clock.set(0.1)
        hub.pump()
        assert [s.score for s in received] == [1]

        clock.set(0.5)
        hub.pump()
        assert [s.score for s in received] == [1, 2]

    def test_decreasing_delay_delivers_out_of_order(self, clock, hub, received):
        hub.set_delay(0.5)
        submit(hub, 1)            # ready at 0.5
        clock.set(0.1)
        hub.set_delay(0.1)
        submit(hub, 2)            # ready at 0.2

        clock.set(0.2)
        hub.pump()
        clock.set(0.5)
        hub.pump()

        assert [s.score for s in received] == [2, 1]

    def test_zero_delay_delivers_on_same_tick(self, clock, hub, received):
        hub.set_delay(0.0)
        clock.set(0.02)
        submit(hub, 1)

        hub.pump()

        assert [s.score for s in received] == [1]


# =============================================================================
# Interpolation
# =============================================================================

class TestInterpolate:
    """Tests for SyncHub.interpolate."""

    def test_t_zero_gives_from(self, hub, state_a, state_b):
        result = hub.interpolate(state_a, state_b, 0.0)

        assert result.position == state_a.position
        assert result.velocity == state_a.velocity
        assert result.rotation.angle_to(state_a.rotation) == pytest.approx(0.0, abs=1e-6)
        assert result.timestamp == pytest.approx(state_a.timestamp)

    def test_t_one_gives_to(self, hub, state_a, state_b):
        result = hub.interpolate(state_a, state_b, 1.0)

        assert result.position == state_b.position
        assert result.velocity == state_b.velocity
        assert result.rotation.angle_to(state_b.rotation) == pytest.approx(0.0, abs=1e-6)
        assert result.timestamp == pytest.approx(state_b.timestamp)

    @pytest.mark.parametrize("t", [0.0, 0.25, 0.5, 1.0])
    def test_discrete_fields_latest_wins(self, hub, state_a, state_b, t):
        result = hub.interpolate(state_a, state_b, t)

        assert result.is_jumping is state_b.is_jumping
        assert result.score == state_b.score

    def test_midpoint(self, hub, state_a, state_b):
        result = hub.interpolate(state_a, state_b, 0.5)

        assert result.position.x == pytest.approx(1.0)
        assert result.position.y == pytest.approx(2.0)
        assert result.position.z == pytest.approx(5.0)
        assert result.velocity.y == pytest.approx(4.0)
        assert result.timestamp == pytest.approx(1.5)
        # Half of a 90 degree turn
        assert result.rotation.angle_to(state_a.rotation) == pytest.approx(math.pi / 4)

    def test_returns_new_snapshot(self, hub, state_a, state_b):
        result = hub.interpolate(state_a, state_b, 0.5)

        assert result is not state_a
        assert result is not state_b

    def test_t_is_not_clamped(self, hub, state_a, state_b):
        result = hub.interpolate(state_a, state_b, 2.0)

        assert result.position.z == pytest.approx(20.0)

    @pytest.mark.parametrize("t", [0.0, 0.3, 1.0])
    def test_disabled_returns_to_unchanged(self, clock, state_a, state_b, t):
        hub = SyncHub(SyncConfig(interpolation_enabled=False), clock)

        assert hub.interpolate(state_a, state_b, t) is state_b

    def test_toggle_interpolation(self, hub, state_a, state_b):
        hub.interpolation_enabled = False
        assert hub.interpolate(state_a, state_b, 0.5) is state_b

        hub.interpolation_enabled = True
        assert hub.interpolate(state_a, state_b, 0.5) is not state_b
