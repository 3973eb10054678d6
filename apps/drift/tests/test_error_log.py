from __future__ import annotations

from pathlib import Path

from drift.common.error_log import ErrorLog


def _raise(msg: str) -> BaseException:
    try:
        raise RuntimeError(msg)
    except RuntimeError as e:
        return e


def test_repeated_tick_failure_collapses_into_one_entry() -> None:
    log = ErrorLog(max_items=10)
    log.record(context="update-loop", exc=_raise("boom"))
    log.record(context="update-loop", exc=_raise("boom"))

    items = log.items()
    assert len(items) == 1
    assert items[0].count == 2
    assert log.last_summary() == "update-loop: RuntimeError: boom (x2)"


def test_error_log_keeps_tail_only() -> None:
    log = ErrorLog(max_items=2)
    for i in range(4):
        log.record(context=f"c{i}", exc=_raise("x"))
    assert [it.context for it in log.items()] == ["c2", "c3"]


def test_error_log_persists_failures(tmp_path: Path) -> None:
    out = tmp_path / "logs" / "errors.log"
    log = ErrorLog(persist_path=out)
    log.record(context="update-loop", exc=_raise("bad tick"))
    text = out.read_text(encoding="utf-8")
    assert "update-loop: RuntimeError: bad tick" in text
    assert "Traceback" in text
