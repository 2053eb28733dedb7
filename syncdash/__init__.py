"""
SyncDash - ghost replication over a simulated network link.

A runner's kinematic state is sampled every physics step, delayed by a
configurable latency and replayed by a ghost that reconstructs smooth
motion from the delayed snapshots.
"""

__version__ = '0.1.0'

from syncdash.sync import MotionReconstructor, StateSnapshot, SyncHub
from syncdash.session import SessionResult, SyncSession

__all__ = [
    'MotionReconstructor',
    'StateSnapshot',
    'SyncHub',
    'SessionResult',
    'SyncSession',
]
