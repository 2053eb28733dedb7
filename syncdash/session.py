"""
Headless fixed-step session: runner -> hub -> ghost.

Wires one of everything together on a ManualClock and steps it at the
configured fixed timestep. Each step:

1. advance the clock
2. runner moves and submits a sample
3. hub fires due deliveries into the ghost
4. ghost ticks toward its target

Usage:
    session = SyncSession(SessionConfig())
    result = session.run(duration=5.0, jump_times=[1.0, 2.5])
    session.finish()
    print(result.max_lag)

run() may be called repeatedly; the session picks up where it stopped and
the score keeps accumulating until finish().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from models.primitives import Vector3
from models.sync import SessionConfig
from syncdash.clock import ManualClock
from syncdash.logging import get_logger
from syncdash.runner import RunnerController
from syncdash.scoring import ScoreKeeper
from syncdash.sync.hub import SyncHub
from syncdash.sync.logger import NullTraceLogger, SyncTraceLogger
from syncdash.sync.reconstructor import MotionReconstructor

log = get_logger('session')


@dataclass
class FrameSample:
    """Runner and ghost state after one step."""
    frame: int
    time: float
    runner_position: Vector3
    ghost_position: Vector3
    delivered: int  # Snapshots fired into the ghost this step
    score: int

    @property
    def lag(self) -> float:
        """Distance from the ghost to the runner."""
        return self.ghost_position.distance_to(self.runner_position)


@dataclass
class SessionResult:
    """Result of a headless run."""
    frames: int
    duration: float
    final_score: int
    runner_position: Vector3
    ghost_position: Vector3
    submitted: int
    delivered: int
    dropped: int
    jumps: int
    jump_overrides: int
    samples: List[FrameSample] = field(default_factory=list)

    @property
    def final_lag(self) -> float:
        return self.ghost_position.distance_to(self.runner_position)

    @property
    def max_lag(self) -> float:
        if not self.samples:
            return 0.0
        return max(s.lag for s in self.samples)

    @property
    def in_flight(self) -> int:
        return self.submitted - self.delivered - self.dropped

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary (samples omitted)."""
        return {
            "frames": self.frames,
            "duration": self.duration,
            "final_score": self.final_score,
            "runner_position": list(self.runner_position.as_tuple()),
            "ghost_position": list(self.ghost_position.as_tuple()),
            "submitted": self.submitted,
            "delivered": self.delivered,
            "dropped": self.dropped,
            "in_flight": self.in_flight,
            "jumps": self.jumps,
            "jump_overrides": self.jump_overrides,
            "final_lag": self.final_lag,
            "max_lag": self.max_lag,
        }


class SyncSession:
    """
    One runner, one link, one ghost.

    Args:
        config: Session configuration (defaults used if omitted)
        clock: Clock to drive (a fresh ManualClock if omitted)
        trace: Optional structured trace logger for the hub
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        clock: Optional[ManualClock] = None,
        trace: Union[SyncTraceLogger, NullTraceLogger, None] = None,
    ):
        self.config = config or SessionConfig()
        self.clock = clock or ManualClock()

        self.hub = SyncHub(self.config.sync, self.clock, trace=trace)
        self.scores = ScoreKeeper(self.config.scoring)
        self.runner = RunnerController(self.config.runner, self.hub, self.scores)
        self.ghost = MotionReconstructor(
            self.hub,
            interpolation_rate=self.config.sync.interpolation_rate,
        )
        self.ghost.attach()

        self._frame = 0

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def dt(self) -> float:
        return self.config.fixed_timestep

    def start(self) -> None:
        """Start scoring. Steps before start() still move and sync."""
        self.scores.start()
        log.info(
            "Session started: delay=%.3fs, dt=%.3fs, interpolation=%s",
            self.hub.get_delay(), self.dt, self.hub.interpolation_enabled,
        )

    def step(self) -> FrameSample:
        """Run one fixed step."""
        dt = self.dt
        self.clock.advance(dt)
        self.runner.step(dt)
        fired = self.hub.pump()
        self.ghost.tick(dt)
        self._frame += 1

        return FrameSample(
            frame=self._frame,
            time=self.clock.now(),
            runner_position=self.runner.position,
            ghost_position=self.ghost.body.position,
            delivered=sum(1 for entry in fired if entry.received),
            score=self.scores.score,
        )

    def run(
        self,
        duration: float,
        jump_times: Iterable[float] = (),
        keep_samples: bool = True,
    ) -> SessionResult:
        """Step for duration seconds of simulated time.

        Scoring starts on the first call and is not restarted by later
        calls, so consecutive runs continue one game.

        Args:
            duration: Simulated seconds to run
            jump_times: Session times at which the runner presses jump
            keep_samples: Record a FrameSample per step

        Returns:
            SessionResult summarizing the run
        """
        if not (self.scores.is_started or self.scores.is_over):
            self.start()

        pending_jumps = sorted(jump_times)
        samples: List[FrameSample] = []
        steps = int(round(duration / self.dt))

        for _ in range(steps):
            next_time = self.clock.now() + self.dt
            while pending_jumps and pending_jumps[0] <= next_time:
                pending_jumps.pop(0)
                self.runner.request_jump()

            sample = self.step()
            if keep_samples:
                samples.append(sample)

        stats = self.hub.stats()
        result = SessionResult(
            frames=self._frame,
            duration=self.clock.now(),
            final_score=self.scores.score,
            runner_position=self.runner.position,
            ghost_position=self.ghost.body.position,
            submitted=stats["submitted"],
            delivered=stats["delivered"],
            dropped=stats["dropped"],
            jumps=self.runner.jump_count,
            jump_overrides=self.ghost.jump_override_count,
            samples=samples,
        )
        log.info(
            "Run finished: %d frames, score=%d, final lag=%.3f",
            result.frames, result.final_score, result.final_lag,
        )
        return result

    def finish(self) -> int:
        """End the game and record the high score.

        Later run() calls still step the runner and ghost but no longer score.

        Returns:
            The final score
        """
        self.scores.end()
        log.info("Session finished: score=%d, high score=%d",
                 self.scores.score, self.scores.high_score)
        return self.scores.score
