"""
Snapshot dataclass for ghost synchronization.

A StateSnapshot captures the runner's kinematics at one instant. Snapshots
are frozen: anything that needs a different value builds a new snapshot,
so the copy retained in the delay buffer and the copy handed to the ghost
can never affect each other.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict

from models.primitives import Quaternion, Vector3


@dataclass(frozen=True)
class StateSnapshot:
    """
    One capture of runner state, as it would travel over the network.

    timestamp is the capture time on the session clock. It is only used to
    weight interpolation; ordering is by insertion, never by timestamp.
    """
    position: Vector3
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    velocity: Vector3 = field(default_factory=Vector3.zero)
    is_jumping: bool = False
    timestamp: float = 0.0
    score: int = 0

    def copy(self) -> 'StateSnapshot':
        """Equal but distinct snapshot (value semantics across the delay)."""
        return dataclasses.replace(self)

    def replace(self, **changes: Any) -> 'StateSnapshot':
        """New snapshot with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form for structured trace records."""
        return {
            "position": list(self.position.as_tuple()),
            "rotation": list(self.rotation.as_tuple()),
            "velocity": list(self.velocity.as_tuple()),
            "is_jumping": self.is_jumping,
            "timestamp": self.timestamp,
            "score": self.score,
        }

    def __repr__(self) -> str:
        return (
            f"StateSnapshot(t={self.timestamp:.3f}, "
            f"pos={self.position}, "
            f"jumping={self.is_jumping}, "
            f"score={self.score})"
        )
