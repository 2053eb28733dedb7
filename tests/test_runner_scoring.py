"""
Runner and Score Tests

Tests for the producer side: ScoreKeeper rules and RunnerController
movement, jumping and submission to the hub.

Run with: pytest tests/test_runner_scoring.py -v
"""

import pytest

from models import RunnerConfig, ScoringConfig, SyncConfig, Vector3
from syncdash.clock import ManualClock
from syncdash.runner import RunnerController
from syncdash.scoring import ScoreKeeper
from syncdash.sync import SyncHub

DT = 0.02


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def hub():
    return SyncHub(SyncConfig(delay=0.1), ManualClock())


@pytest.fixture
def scores():
    keeper = ScoreKeeper(ScoringConfig())
    keeper.start()
    return keeper


@pytest.fixture
def runner(hub, scores):
    # Constant speed keeps expected positions exact
    return RunnerController(RunnerConfig(speed_increase_rate=0.0), hub, scores)


# =============================================================================
# ScoreKeeper
# =============================================================================

class TestScoreKeeper:
    """Distance and collectible scoring."""

    def test_ignored_before_start(self):
        keeper = ScoreKeeper()

        keeper.add_distance(5.0)
        keeper.collect_orb()

        assert keeper.score == 0
        assert keeper.is_started is False

    def test_distance_and_orbs(self, scores):
        scores.add_distance(12.4)
        assert scores.score == 12

        scores.collect_orb()
        assert scores.score == 22

    def test_multiplier(self):
        keeper = ScoreKeeper(ScoringConfig(distance_score_multiplier=2.0, collectible_score_value=5))
        keeper.start()

        keeper.add_distance(3.2)
        keeper.collect_orb()

        assert keeper.score == 11

    def test_end_records_high_score_and_freezes(self, scores):
        scores.add_distance(30.0)
        scores.end()

        scores.add_distance(10.0)
        scores.collect_orb()

        assert scores.is_over is True
        assert scores.score == 30
        assert scores.high_score == 30

    def test_restart_keeps_high_score(self, scores):
        scores.add_distance(30.0)
        scores.end()

        scores.start()
        scores.add_distance(4.0)
        scores.end()

        assert scores.score == 4
        assert scores.high_score == 30

    def test_hooks(self):
        keeper = ScoreKeeper()
        changes, events = [], []
        keeper.on_score_changed = changes.append
        keeper.on_started = lambda: events.append("started")
        keeper.on_game_over = lambda: events.append("over")

        keeper.start()
        keeper.add_distance(2.2)
        keeper.end()
        keeper.end()

        assert changes == [0, 2]
        assert events == ["started", "over"]


# =============================================================================
# RunnerController
# =============================================================================

class TestRunnerMovement:
    """Forward motion and derived velocity."""

    def test_starts_grounded_at_origin(self, runner):
        assert runner.position == Vector3.zero()
        assert runner.is_grounded is True

    def test_single_step(self, runner):
        distance = runner.step(DT)

        assert runner.position.z == pytest.approx(0.1)
        assert runner.position.y == 0.0
        assert distance == pytest.approx(0.1)
        assert runner.velocity.z == pytest.approx(5.0)
        assert runner.velocity.y == pytest.approx(0.0)

    def test_speed_increases_with_time(self, hub):
        runner = RunnerController(RunnerConfig(speed_increase_rate=1.0), hub)

        for _ in range(50):
            runner.step(DT)

        assert runner.current_speed == pytest.approx(6.0)

    def test_each_step_submits_to_hub(self, hub, runner):
        for _ in range(3):
            runner.step(DT)

        assert hub.stats()["submitted"] == 3
        newest = hub.buffer.newest
        assert newest.position == runner.position
        assert newest.is_jumping is False

    def test_distance_credited_to_score(self, hub, runner, scores):
        for _ in range(50):
            runner.step(DT)

        assert scores.distance == pytest.approx(5.0)
        assert scores.score == 5
        assert scores.score == pytest.approx(runner.position.z, abs=0.5)
        assert hub.buffer.newest.score == scores.score

    def test_rests_on_ground(self, runner):
        for _ in range(20):
            runner.step(DT)

        assert runner.position.y == 0.0
        assert runner.is_grounded is True


class TestRunnerJump:
    """Jump integration and the is_jumping cue."""

    def test_jump_leaves_ground(self, hub, runner):
        runner.request_jump()
        runner.step(DT)

        assert runner.jump_count == 1
        assert runner.position.y > 0.0
        assert runner.velocity.y > 0.0
        assert runner.is_grounded is False
        assert hub.buffer.newest.is_jumping is True

    def test_jump_velocity(self, runner):
        runner.request_jump()
        runner.step(DT)

        # jump_force / mass, minus one step of gravity
        assert runner.velocity.y == pytest.approx(8.0 - 9.81 * DT)

    def test_airborne_jump_ignored(self, runner):
        runner.request_jump()
        runner.step(DT)

        runner.request_jump()
        runner.step(DT)

        assert runner.jump_count == 1

    def test_lands_again(self, runner):
        runner.request_jump()
        for _ in range(150):
            runner.step(DT)

        assert runner.position.y == 0.0
        assert runner.is_grounded is True

    def test_can_jump_after_landing(self, runner):
        runner.request_jump()
        for _ in range(150):
            runner.step(DT)

        runner.request_jump()
        runner.step(DT)

        assert runner.jump_count == 2
