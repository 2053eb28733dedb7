"""
Configuration models for the ghost synchronization session.

All models are Pydantic so they can be validated straight from YAML
(see syncdash.config.load_config). Defaults: 100ms simulated latency,
one second of 60fps history, 10/s interpolation rate.
"""

from pydantic import BaseModel, Field, field_validator

MIN_DELAY = 0.0
MAX_DELAY = 1.0


def clamp_delay(value: float) -> float:
    """Clamp a simulated latency (seconds) into the supported [0, 1] range."""
    return max(MIN_DELAY, min(MAX_DELAY, float(value)))


class SyncConfig(BaseModel):
    """Synchronization layer settings.

    Attributes:
        delay: Simulated one-way latency in seconds. Out-of-range values are
            clamped into [0, 1] rather than rejected.
        buffer_capacity: Number of recent snapshots retained for diagnostics
        interpolation_enabled: When False, interpolate() snaps to the latest
            snapshot
        interpolation_rate: Exponential-decay rate (1/s) used by the ghost to
            chase its target; higher converges faster

    Examples:
        >>> SyncConfig(delay=3.0).delay
        1.0
    """
    delay: float = 0.1
    buffer_capacity: int = Field(default=60, gt=0)
    interpolation_enabled: bool = True
    interpolation_rate: float = Field(default=10.0, gt=0)

    @field_validator('delay')
    @classmethod
    def clamp_delay_range(cls, v: float) -> float:
        """Silently clamp delay into [0, 1]."""
        return clamp_delay(v)


class RunnerConfig(BaseModel):
    """Movement tuning for the producer-side runner."""
    forward_speed: float = Field(default=5.0, ge=0)
    jump_force: float = Field(default=8.0, ge=0)
    speed_increase_rate: float = Field(default=0.1, ge=0)  # Speed gained per second
    gravity: float = Field(default=9.81, ge=0)
    ground_height: float = 0.0
    ground_check_distance: float = Field(default=0.1, ge=0)
    mass: float = Field(default=1.0, gt=0)


class ScoringConfig(BaseModel):
    """Score rules: distance travelled plus collectibles."""
    distance_score_multiplier: float = Field(default=1.0, ge=0)
    collectible_score_value: int = Field(default=10, ge=0)


class SessionConfig(BaseModel):
    """Top-level configuration for a simulated session.

    Attributes:
        fixed_timestep: Physics step length in seconds
        sync: Synchronization layer settings
        runner: Producer movement settings
        scoring: Score rules
    """
    fixed_timestep: float = Field(default=0.02, gt=0)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
