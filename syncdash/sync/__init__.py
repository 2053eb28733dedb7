"""
Ghost synchronization over a simulated network link.

The runner submits its state every fixed step; the hub delays each
snapshot by the configured latency and hands it to the ghost, which
smooths the delayed stream back into continuous motion.

Usage:
    from syncdash.sync import SyncHub, MotionReconstructor

    hub = SyncHub(SyncConfig(delay=0.1), clock)
    ghost = MotionReconstructor(hub)
    ghost.attach()

    # In the fixed-step loop:
    hub.submit(position, velocity, is_jumping, score)
    hub.pump()
    ghost.tick(dt)
"""

from .snapshot import StateSnapshot
from .buffer import DelayBuffer
from .scheduler import DeliveryScheduler, ScheduledDelivery
from .hub import SyncHub, interpolate_snapshots
from .reconstructor import GhostBody, MotionReconstructor, Pose, ReconstructorState
from .logger import NullTraceLogger, SyncTraceLogger, create_trace_logger

__all__ = [
    'StateSnapshot',
    'DelayBuffer',
    'DeliveryScheduler',
    'ScheduledDelivery',
    'SyncHub',
    'interpolate_snapshots',
    'GhostBody',
    'MotionReconstructor',
    'Pose',
    'ReconstructorState',
    'NullTraceLogger',
    'SyncTraceLogger',
    'create_trace_logger',
]
