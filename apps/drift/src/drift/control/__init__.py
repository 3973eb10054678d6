from __future__ import annotations

from drift.control.actuation import ActuationTuning, ControlBody, Controller, TickReport
from drift.control.cooldown import Cooldown
from drift.control.heat import HeatState, heat_color
from drift.control.input_events import (
    Accelerate,
    Force,
    Impulse,
    InputEvent,
    InputSnapshot,
    Stabilisation,
    decode_input_events,
)

__all__ = [
    "Accelerate",
    "ActuationTuning",
    "ControlBody",
    "Controller",
    "Cooldown",
    "Force",
    "HeatState",
    "Impulse",
    "InputEvent",
    "InputSnapshot",
    "Stabilisation",
    "TickReport",
    "decode_input_events",
    "heat_color",
]
