from __future__ import annotations

import hashlib
import json
import logging
import math
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from panda3d.core import LVector2f

from drift.control.actuation import ActuationTuning, Controller
from drift.control.input_events import InputEvent, event_from_dict, event_to_dict


logger = logging.getLogger(__name__)

EVENT_LOG_FORMAT_VERSION = 1
EVENT_LOG_EXT = ".drift_events.json"


@dataclass(frozen=True)
class EventLogFrame:
    dt: float
    # Body velocity as seen by the control step (Accelerate reads it).
    linvel: tuple[float, float]
    events: tuple[InputEvent, ...] = ()
    # Full tuning in effect from this tick on, when it changed since the previous tick.
    tuning: dict[str, float] | None = None
    # The controlled body was respawned (fresh heat/damping) before this tick.
    reset: bool = False


@dataclass
class EventLog:
    created_at_unix: float
    tuning: dict[str, float]
    frames: list[EventLogFrame] = field(default_factory=list)


@dataclass(frozen=True)
class TickSample:
    tick: int
    heat: float
    cooldown_ready: bool
    damping: float
    impulse: tuple[float, float] | None
    force: tuple[float, float]
    applied: int
    dropped: int


def new_event_log(*, tuning: ActuationTuning) -> EventLog:
    return EventLog(created_at_unix=float(time.time()), tuning=asdict(tuning))


def append_frame(
    log: EventLog,
    *,
    dt: float,
    linvel: LVector2f,
    events: list[InputEvent],
    tuning: ActuationTuning | None = None,
    reset: bool = False,
) -> None:
    log.frames.append(
        EventLogFrame(
            dt=float(dt),
            linvel=(float(linvel.x), float(linvel.y)),
            events=tuple(events),
            tuning=asdict(tuning) if tuning is not None else None,
            reset=bool(reset),
        )
    )


def _frame_to_dict(f: EventLogFrame) -> dict:
    out: dict = {
        "dt": f.dt,
        "v": [f.linvel[0], f.linvel[1]],
        "ev": [event_to_dict(e) for e in f.events],
    }
    if f.tuning is not None:
        out["tu"] = f.tuning
    if f.reset:
        out["rs"] = True
    return out


def save_event_log(log: EventLog, path: Path) -> Path:
    payload = {
        "format_version": EVENT_LOG_FORMAT_VERSION,
        "created_at_unix": log.created_at_unix,
        "tuning": log.tuning,
        "frames": [_frame_to_dict(f) for f in log.frames],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=True, sort_keys=True, separators=(",", ":")) + "\n", encoding="utf-8")
    logger.info("Saved event log: %s (%d ticks)", path, len(log.frames))
    return path


def _finite(value, *, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{what} must be a number, got {value!r}")
    out = float(value)
    if not math.isfinite(out):
        raise ValueError(f"{what} must be finite, got {value!r}")
    return out


def _tuning_values(raw, *, where: str) -> dict[str, float]:
    if not isinstance(raw, dict):
        raise ValueError(f"{where} tuning must be an object, got {raw!r}")
    known = ActuationTuning.__dataclass_fields__
    return {k: _finite(v, what=f"{where} tuning {k!r}") for k, v in raw.items() if k in known}


def _parse_frame(idx: int, row) -> EventLogFrame:
    if not isinstance(row, dict):
        raise ValueError(f"Invalid event log frame at index {idx}")
    dt = _finite(row.get("dt", 0.0), what=f"dt in event log frame {idx}")
    if dt < 0.0:
        raise ValueError(f"Negative dt in event log frame {idx}")
    v = row.get("v", [0.0, 0.0])
    if not isinstance(v, (list, tuple)) or len(v) != 2:
        raise ValueError(f"Event log frame {idx} needs a 2D velocity, got {v!r}")
    events_in = row.get("ev", [])
    if not isinstance(events_in, list):
        raise ValueError(f"Event log frame {idx} events must be a list")
    tu = row.get("tu")
    return EventLogFrame(
        dt=dt,
        linvel=(_finite(v[0], what=f"velocity in frame {idx}"), _finite(v[1], what=f"velocity in frame {idx}")),
        events=tuple(event_from_dict(e) for e in events_in),
        tuning=_tuning_values(tu, where=f"frame {idx}") if tu is not None else None,
        reset=bool(row.get("rs") is True),
    )


def load_event_log(path: Path) -> EventLog:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Invalid event log payload")
    ver = raw.get("format_version")
    if ver != EVENT_LOG_FORMAT_VERSION:
        raise ValueError(f"Unsupported event log format_version={ver}")

    frames_in = raw.get("frames")
    if not isinstance(frames_in, list):
        raise ValueError("Missing event log frames")

    return EventLog(
        created_at_unix=float(raw.get("created_at_unix") or 0.0),
        tuning=_tuning_values(raw.get("tuning") or {}, where="Event log"),
        frames=[_parse_frame(idx, row) for idx, row in enumerate(frames_in)],
    )


def tuning_from_log(log: EventLog) -> ActuationTuning:
    return ActuationTuning(**_tuning_values(log.tuning, where="Event log"))


def _vec(v: LVector2f | None) -> tuple[float, float] | None:
    if v is None:
        return None
    return (float(v.x), float(v.y))


def replay(log: EventLog, *, tuning: ActuationTuning | None = None) -> list[TickSample]:
    """
    Re-run the control step over a recorded log; the physics side is replaced by the recorded velocity.

    Mid-run tuning changes and body resets recorded on a frame are applied before that frame's step,
    matching the order the host sees them.
    """

    start = ActuationTuning(**asdict(tuning)) if tuning is not None else tuning_from_log(log)
    controller = Controller(start)
    body = controller.new_body()
    samples: list[TickSample] = []
    for tick, frame in enumerate(log.frames):
        if frame.tuning is not None:
            # Cooldown duration stays fixed for the run, same as the live controller.
            for name, value in frame.tuning.items():
                setattr(controller.tuning, name, float(value))
        if frame.reset:
            body = controller.new_body()
        body.linvel = LVector2f(frame.linvel[0], frame.linvel[1])
        report = controller.step(frame.dt, frame.events, [body])
        samples.append(
            TickSample(
                tick=tick,
                heat=float(body.heat.amount),
                cooldown_ready=controller.impulse_cooldown.ready(),
                damping=float(body.damping),
                impulse=_vec(body.take_impulse()),
                force=(float(body.force.x), float(body.force.y)),
                applied=len(report.applied),
                dropped=len(report.dropped),
            )
        )
    return samples


def trace_hash(samples: list[TickSample]) -> str:
    """Quantized digest of a replay trajectory for determinism checks."""

    h = hashlib.blake2b(digest_size=8)
    for s in samples:
        imp = s.impulse if s.impulse is not None else (0.0, 0.0)
        q = (
            int(s.tick),
            int(round(s.heat * 10000.0)),
            int(bool(s.cooldown_ready)),
            int(round(s.damping * 1000.0)),
            int(s.impulse is not None),
            int(round(imp[0] * 1000.0)),
            int(round(imp[1] * 1000.0)),
            int(round(s.force[0] * 1000.0)),
            int(round(s.force[1] * 1000.0)),
            int(s.applied),
            int(s.dropped),
        )
        h.update(repr(q).encode("utf-8", errors="strict"))
    return h.hexdigest()


__all__ = [
    "EVENT_LOG_EXT",
    "EVENT_LOG_FORMAT_VERSION",
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
