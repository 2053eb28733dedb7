"""Score bookkeeping for a run: distance travelled plus collected orbs."""

from typing import Callable, Optional

from models.sync import ScoringConfig
from syncdash.logging import get_logger

log = get_logger('scoring')


class ScoreKeeper:
    """
    Tracks the runner's score for one session.

    score = round(distance * distance_score_multiplier) + orbs * collectible_score_value

    Changes are ignored unless the game has started and is not over. The
    high score survives restarts of the same keeper but is not persisted.

    Hooks (single slot each, None to clear):
        on_score_changed(score), on_started(), on_game_over()
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

        self._started = False
        self._over = False
        self._distance = 0.0
        self._collectible_score = 0
        self._score = 0
        self._high_score = 0

        self.on_score_changed: Optional[Callable[[int], None]] = None
        self.on_started: Optional[Callable[[], None]] = None
        self.on_game_over: Optional[Callable[[], None]] = None

    def start(self) -> None:
        """Begin (or restart) a run with a zero score."""
        self._started = True
        self._over = False
        self._distance = 0.0
        self._collectible_score = 0
        self._score = 0

        if self.on_started:
            self.on_started()
        self._update_score()

    def end(self) -> None:
        """Finish the run. Calling again has no effect."""
        if self._over:
            return

        self._over = True
        self._started = False

        if self._score > self._high_score:
            log.info("New high score: %d", self._score)
            self._high_score = self._score

        if self.on_game_over:
            self.on_game_over()

    def add_distance(self, distance: float) -> None:
        if not self._started or self._over:
            return
        self._distance += distance
        self._update_score()

    def collect_orb(self) -> None:
        if not self._started or self._over:
            return
        self._collectible_score += self.config.collectible_score_value
        self._update_score()

    def _update_score(self) -> None:
        self._score = (
            round(self._distance * self.config.distance_score_multiplier)
            + self._collectible_score
        )
        if self.on_score_changed:
            self.on_score_changed(self._score)

    @property
    def score(self) -> int:
        return self._score

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def distance(self) -> float:
        return self._distance

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_over(self) -> bool:
        return self._over
