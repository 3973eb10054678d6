from __future__ import annotations

import argparse
import logging
from pathlib import Path

from drift.app_config import RunConfig
from drift.replays.event_log import load_event_log, replay, trace_hash


def _run_replay(path: Path) -> int:
    log = load_event_log(path)
    samples = replay(log)
    final_heat = samples[-1].heat if samples else 0.0
    dropped = sum(s.dropped for s in samples)
    print(f"ticks={len(samples)} final_heat={final_heat:.4f} dropped={dropped} trace={trace_hash(samples)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="drift", description="Drift arena prototype runner")
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Run briefly and exit (for quick verification).",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=Path("drift_settings.json"),
        help="Path to JSON settings file for actuation tuning.",
    )
    parser.add_argument(
        "--record",
        type=Path,
        default=None,
        help="Write the decoded input event stream to this file on exit.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Replay a recorded event log headlessly and print its trace hash.",
    )
    parser.add_argument(
        "--error-log",
        type=Path,
        default=None,
        help="Append update-loop failures to this file.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (DEBUG shows cooldown-dropped actions).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.replay is not None:
        return _run_replay(args.replay)

    # Imported lazily so headless replays do not need a display.
    from drift.game import run

    run(
        RunConfig(
            smoke=args.smoke,
            settings_path=args.settings,
            record_path=args.record,
            error_log_path=args.error_log,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
