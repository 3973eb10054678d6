from __future__ import annotations

from pathlib import Path

from panda3d.core import LVector2f

from drift.__main__ import main
from drift.control.actuation import ActuationTuning
from drift.control.input_events import Impulse, Stabilisation
from drift.replays.event_log import append_frame, new_event_log, replay, save_event_log, trace_hash


def test_replay_flag_prints_trace_summary(tmp_path: Path, capsys) -> None:
    log = new_event_log(tuning=ActuationTuning())
    append_frame(log, dt=0.016, linvel=LVector2f(0.0, 0.0), events=[Impulse(LVector2f(0.0, 1.0))])
    append_frame(log, dt=0.016, linvel=LVector2f(0.0, 0.0), events=[Stabilisation()])
    path = save_event_log(log, tmp_path / "run.drift_events.json")

    rc = main(["--replay", str(path), "--log-level", "WARNING"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "ticks=2" in out
    assert "final_heat=0.0000" in out
    assert f"trace={trace_hash(replay(log))}" in out
