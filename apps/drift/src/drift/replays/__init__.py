from __future__ import annotations

from drift.replays.event_log import (
    EventLog,
    EventLogFrame,
    TickSample,
    append_frame,
    load_event_log,
    new_event_log,
    replay,
    save_event_log,
    trace_hash,
)

__all__ = [
    "EventLog",
    "EventLogFrame",
    "TickSample",
    "append_frame",
    "load_event_log",
    "new_event_log",
    "replay",
    "save_event_log",
    "trace_hash",
]
