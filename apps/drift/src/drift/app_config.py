from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RunConfig:
    smoke: bool = False
    # JSON tuning/flags file; missing file means defaults.
    settings_path: Path = Path("drift_settings.json")
    # When set, the decoded event stream is written here on exit.
    record_path: Path | None = None
    # Failing ticks are appended here as well as logged.
    error_log_path: Path | None = None
