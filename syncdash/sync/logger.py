"""
Sync trace - structured records of what crossed the simulated link.

Every fired delivery (or drop) and every delay change is recorded;
submissions are sampled every log_interval. Records go to the sink
registered for the 'sync' module, so a FileSink turns a run into a JSONL
file that load_trace() / summarize_trace() can read back.

Off unless asked for:
    SYNCDASH_LOGGING_SYNC_ENABLED=true
    SYNCDASH_LOGGING_SYNC_INTERVAL=5
    SYNCDASH_LOG_DIR=./debug_logs
or create_trace_logger(force=True).
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from syncdash.logging import (
    FileSink,
    create_sink_for_module,
    emit_record,
    get_module_config,
    get_sink,
    register_sink,
)

from .scheduler import ScheduledDelivery
from .snapshot import StateSnapshot

SYNC_MODULE = 'sync'


class SyncTraceLogger:
    """
    Writes sync records to the 'sync' sink.

    Args:
        session_name: Label stored in the header (defaults to the start time)
        log_interval: Record one submission in every log_interval

    Example:
        with create_trace_logger(session_name="lag_check") as trace:
            session = SyncSession(config, trace=trace)
            session.run(5.0)
    """

    def __init__(
        self,
        session_name: Optional[str] = None,
        log_interval: int = 1,
    ):
        self.session_name = session_name or time.strftime("%Y%m%d_%H%M%S")
        self.log_interval = max(1, int(log_interval))

        self._submits_seen = 0
        self._next_index = 0
        self._closed = False

        emit_record(SYNC_MODULE, {
            "type": "header",
            "session_name": self.session_name,
            "log_interval": self.log_interval,
            "start_time": time.time(),
        })

    def _record(self, record_type: str, **fields: Any) -> None:
        """Emit a numbered record."""
        emit_record(SYNC_MODULE, {"type": record_type, **fields, "log_index": self._next_index})
        self._next_index += 1

    def log_submit(self, snapshot: StateSnapshot, delay: float) -> bool:
        """Record a submission if it falls on the sampling interval.

        Returns:
            Whether a record was written
        """
        self._submits_seen += 1
        if self._submits_seen % self.log_interval:
            return False
        self._record("submit", delay=delay, snapshot=snapshot.to_dict())
        return True

    def log_delivery(self, entry: ScheduledDelivery) -> None:
        """Record a fired entry as 'deliver', or 'drop' if nobody received it."""
        self._record(
            "deliver" if entry.received else "drop",
            sequence=entry.sequence,
            scheduled_at=entry.scheduled_at,
            ready_at=entry.ready_at,
            fired_at=entry.fired_at,
            snapshot=entry.snapshot.to_dict(),
        )

    def log_delay_change(self, requested: float, applied: float) -> None:
        self._record("delay_change", requested=requested, applied=applied)

    def log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Free-form record, e.g. a marker from a test harness."""
        self._record(event_type, **data)

    def flush(self) -> None:
        sink = get_sink(SYNC_MODULE)
        if sink is not None:
            sink.flush()

    def close(self) -> None:
        """Write the summary record once. The sink stays open for other writers."""
        if self._closed:
            return
        self._closed = True
        emit_record(SYNC_MODULE, {
            "type": "summary",
            "total_submits": self._submits_seen,
            "logged_records": self._next_index,
            "end_time": time.time(),
        })
        self.flush()

    @property
    def log_path(self) -> Optional[Path]:
        """JSONL file being written, when the sink is a FileSink."""
        sink = get_sink(SYNC_MODULE)
        if not isinstance(sink, FileSink):
            return None
        return sink.log_paths.get(SYNC_MODULE)

    @property
    def stats(self) -> Dict[str, Any]:
        path = self.log_path
        return {
            "session_name": self.session_name,
            "log_interval": self.log_interval,
            "total_submits": self._submits_seen,
            "logged_records": self._next_index,
            "log_path": str(path) if path else None,
        }

    def __enter__(self) -> 'SyncTraceLogger':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class NullTraceLogger:
    """Stand-in used when tracing is off; every call does nothing."""

    def log_submit(self, snapshot: StateSnapshot, delay: float) -> bool:
        return False

    def log_delivery(self, entry: ScheduledDelivery) -> None:
        pass

    def log_delay_change(self, requested: float, applied: float) -> None:
        pass

    def log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    @property
    def log_path(self) -> Optional[Path]:
        return None

    @property
    def stats(self) -> Dict[str, Any]:
        return {"enabled": False}

    def __enter__(self) -> 'NullTraceLogger':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass


TraceLogger = Union[SyncTraceLogger, NullTraceLogger]


def create_trace_logger(
    session_name: Optional[str] = None,
    log_interval: Optional[int] = None,
    force: bool = False,
) -> TraceLogger:
    """Build the trace logger the current configuration asks for.

    Without SYNCDASH_LOGGING_SYNC_ENABLED (or force) this is a
    NullTraceLogger. Otherwise a SyncTraceLogger, after registering a
    FileSink for 'sync' if no sink is registered yet.

    Args:
        session_name: Header label and FileSink file prefix
        log_interval: Submission sampling (defaults to the configured
            interval, else 1)
        force: Trace even when the configuration has it disabled
    """
    settings = get_module_config(SYNC_MODULE)
    enabled = bool(settings.get('enabled', False))
    if not (enabled or force):
        return NullTraceLogger()

    if get_sink(SYNC_MODULE) is None:
        sink = (create_sink_for_module(SYNC_MODULE, session_name) if enabled
                else FileSink(session_name=session_name))
        register_sink(SYNC_MODULE, sink)

    interval = log_interval if log_interval is not None else settings.get('interval', 1)
    return SyncTraceLogger(session_name=session_name, log_interval=interval)


def load_trace(log_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Parse a JSONL trace file into a list of records."""
    with open(log_path, 'r') as f:
        return [json.loads(line) for line in f if line.strip()]


def summarize_trace(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts and latency range for a list of trace records.

    out_of_order counts deliveries whose sequence number is lower than the
    delivery before it (possible when the delay was lowered mid-run).
    min_latency / max_latency / out_of_order are only present when at
    least one delivery was recorded.
    """
    counts: Dict[str, int] = {}
    for record in records:
        record_type = record.get("type")
        counts[record_type] = counts.get(record_type, 0) + 1

    summary: Dict[str, Any] = {
        "logged_submits": counts.get("submit", 0),
        "delivered": counts.get("deliver", 0),
        "dropped": counts.get("drop", 0),
        "delay_changes": counts.get("delay_change", 0),
    }

    deliveries = [r for r in records if r.get("type") == "deliver"]
    if deliveries:
        latencies = [r["fired_at"] - r["scheduled_at"] for r in deliveries]
        sequences = [r["sequence"] for r in deliveries]
        summary["min_latency"] = min(latencies)
        summary["max_latency"] = max(latencies)
        summary["out_of_order"] = sum(
            1 for earlier, later in zip(sequences, sequences[1:]) if later < earlier
        )
    return summary
