"""
Unified models library for the SyncDash project.

This package provides the Pydantic data models used across the system:
- Primitives: 3D kinematic types (Vector3, Quaternion)
- Sync: Session, synchronization, runner and scoring configuration

Usage:
    >>> from models import Vector3, SyncConfig
    >>> from models.sync import SessionConfig
"""

# ============================================================================
# Primitives (basic types used everywhere)
# ============================================================================
from .primitives import (
    Vector3,
    Quaternion,
)

# ============================================================================
# Configuration models
# ============================================================================
from .sync import (
    MIN_DELAY,
    MAX_DELAY,
    clamp_delay,
    SyncConfig,
    RunnerConfig,
    ScoringConfig,
    SessionConfig,
)

__all__ = [
    # Primitives
    "Vector3",
    "Quaternion",
    # Configuration
    "MIN_DELAY",
    "MAX_DELAY",
    "clamp_delay",
    "SyncConfig",
    "RunnerConfig",
    "ScoringConfig",
    "SessionConfig",
]
