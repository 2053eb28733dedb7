"""
Runner Controller - the producer side of the link.

Moves the runner forward at a steadily increasing speed, integrates jumps
under gravity, and submits a sample to the hub every fixed step. Velocity
is derived from the position change over the step, the same quantity a
remote peer would observe.
"""

from typing import Optional, TYPE_CHECKING

from models.primitives import Vector3
from models.sync import RunnerConfig
from syncdash.logging import get_logger

if TYPE_CHECKING:
    from syncdash.scoring import ScoreKeeper
    from syncdash.sync.hub import SyncHub

log = get_logger('runner')


class RunnerController:
    """
    Auto-forward runner with tap-to-jump.

    Args:
        config: Movement tuning
        hub: Link to submit samples on
        scores: Score keeper credited with travelled distance (optional)
        start_position: Initial position (defaults to the origin)

    Example:
        runner = RunnerController(RunnerConfig(), hub, scores)
        runner.request_jump()
        runner.step(0.02)  # Moves, then submits to hub
    """

    def __init__(
        self,
        config: RunnerConfig,
        hub: 'SyncHub',
        scores: Optional['ScoreKeeper'] = None,
        start_position: Optional[Vector3] = None,
    ):
        self.config = config
        self._hub = hub
        self._scores = scores

        self.position = start_position or Vector3(y=config.ground_height)
        self.velocity = Vector3.zero()
        self._vertical_speed = 0.0
        self._elapsed = 0.0
        self._jump_requested = False
        self._jump_count = 0
        self._grounded = self._check_grounded()

    @property
    def current_speed(self) -> float:
        """Forward speed, growing linearly with elapsed time."""
        return self.config.forward_speed + self._elapsed * self.config.speed_increase_rate

    @property
    def is_grounded(self) -> bool:
        return self._grounded

    @property
    def jump_count(self) -> int:
        return self._jump_count

    def request_jump(self) -> None:
        """Queue a jump for the next step (ignored then if airborne)."""
        self._jump_requested = True

    def _check_grounded(self) -> bool:
        height = self.position.y - self.config.ground_height
        return height <= self.config.ground_check_distance + 0.1 and self._vertical_speed <= 0.0

    def step(self, dt: float) -> float:
        """Advance one fixed step and submit the resulting sample.

        Returns:
            Distance travelled during the step
        """
        self._elapsed += dt
        last_position = self.position

        if self._jump_requested:
            if self._grounded:
                self._vertical_speed += self.config.jump_force / self.config.mass
                self._jump_count += 1
                log.debug("Jump at t=%.3f", self._elapsed)
            self._jump_requested = False

        self._vertical_speed -= self.config.gravity * dt
        y = last_position.y + self._vertical_speed * dt
        if y <= self.config.ground_height:
            y = self.config.ground_height
            self._vertical_speed = 0.0

        self.position = Vector3(
            x=last_position.x,
            y=y,
            z=last_position.z + self.current_speed * dt,
        )
        self.velocity = (self.position - last_position) / dt
        self._grounded = self._check_grounded()

        distance = self.position.distance_to(last_position)
        if self._scores is not None:
            self._scores.add_distance(distance)

        score = self._scores.score if self._scores is not None else 0
        self._hub.submit(self.position, self.velocity, not self._grounded, score)
        return distance
