from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from drift.control.actuation import ActuationTuning


logger = logging.getLogger(__name__)


@dataclass
class FeatureFlags:
    show_debug: bool = True
    show_effects: bool = True


@dataclass
class Settings:
    tuning: ActuationTuning = field(default_factory=ActuationTuning)
    flags: FeatureFlags = field(default_factory=FeatureFlags)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Settings":
        tuning_payload = payload.get("tuning") or {}
        flags_payload = payload.get("flags") or {}
        if not isinstance(tuning_payload, dict) or not isinstance(flags_payload, dict):
            raise ValueError("Settings 'tuning' and 'flags' must be JSON objects")
        tuning_known = ActuationTuning.__dataclass_fields__
        flags_known = FeatureFlags.__dataclass_fields__
        return cls(
            tuning=ActuationTuning(
                **{
                    **asdict(ActuationTuning()),
                    **{k: float(v) for k, v in tuning_payload.items() if k in tuning_known},
                }
            ),
            flags=FeatureFlags(
                **{
                    **asdict(FeatureFlags()),
                    **{k: v for k, v in flags_payload.items() if k in flags_known and isinstance(v, bool)},
                }
            ),
        )


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring malformed settings %s: %s", path, exc)
        return Settings()
    if not isinstance(payload, dict):
        logger.warning("Ignoring settings %s: top level is not an object", path)
        return Settings()
    try:
        settings = Settings.from_dict(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid settings %s: %s", path, exc)
        return Settings()
    logger.info("Loaded settings: %s", path)
    return settings


def save_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Saved settings: %s", path)


__all__ = ["FeatureFlags", "Settings", "load_settings", "save_settings"]
