from __future__ import annotations

import json
from pathlib import Path

from drift.settings import Settings, load_settings, save_settings


def test_missing_settings_file_uses_defaults(tmp_path: Path) -> None:
    s = load_settings(tmp_path / "nope.json")
    assert s.tuning.impulse_value == 15.0
    assert s.tuning.impulse_cooldown == 0.5
    assert s.flags.show_debug is True


def test_partial_payload_merges_over_defaults(tmp_path: Path) -> None:
    p = tmp_path / "drift_settings.json"
    p.write_text(json.dumps({"tuning": {"force_value": 9, "unknown": 1}, "flags": {"show_effects": False}}), encoding="utf-8")
    s = load_settings(p)
    assert s.tuning.force_value == 9.0
    assert s.tuning.stabilisation_damping == 6.0
    assert s.flags.show_effects is False
    assert s.flags.show_debug is True


def test_malformed_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    p = tmp_path / "bad.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_settings(p) == Settings()
    p.write_text(json.dumps({"tuning": [1, 2]}), encoding="utf-8")
    assert load_settings(p) == Settings()


def test_save_then_load_keeps_adjusted_tuning(tmp_path: Path) -> None:
    p = tmp_path / "out" / "drift_settings.json"
    s = Settings()
    s.tuning.impulse_value = 18.0
    s.flags.show_debug = False
    save_settings(s, p)
    assert load_settings(p) == s


def test_flags_accept_only_real_booleans(tmp_path: Path) -> None:
    p = tmp_path / "drift_settings.json"
    p.write_text(json.dumps({"flags": {"show_debug": "false", "show_effects": 0}}), encoding="utf-8")
    s = load_settings(p)
    assert s.flags.show_debug is True
    assert s.flags.show_effects is True

    p.write_text(json.dumps({"flags": {"show_debug": False}}), encoding="utf-8")
    assert load_settings(p).flags.show_debug is False
