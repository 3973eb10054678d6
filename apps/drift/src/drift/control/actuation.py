from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from panda3d.core import LVector2f

from drift.control.cooldown import Cooldown
from drift.control.heat import HeatState
from drift.control.input_events import Accelerate, Force, Impulse, InputEvent, Stabilisation


logger = logging.getLogger(__name__)


@dataclass
class ActuationTuning:
    impulse_value: float = 15.0
    force_value: float = 6.0
    # Accelerate re-applies this fraction of the current velocity as an impulse.
    acceleration_value: float = 0.3
    default_damping: float = 1.0
    stabilisation_damping: float = 6.0
    # Shared by Impulse and Accelerate.
    impulse_cooldown: float = 0.5
    impulse_heat: float = 0.2
    force_heat: float = 0.01
    stabilisation_heat: float = -1.0


@dataclass
class ControlBody:
    """Actuation fields of one controlled body; the physics side owns velocity and consumes requests."""

    linvel: LVector2f = field(default_factory=lambda: LVector2f(0.0, 0.0))
    damping: float = 1.0
    impulse: LVector2f | None = None
    force: LVector2f = field(default_factory=lambda: LVector2f(0.0, 0.0))
    heat: HeatState = field(default_factory=HeatState)

    def request_impulse(self, impulse: LVector2f) -> None:
        if self.impulse is None:
            self.impulse = LVector2f(impulse)
        else:
            self.impulse = LVector2f(self.impulse + impulse)

    def take_impulse(self) -> LVector2f | None:
        out = self.impulse
        self.impulse = None
        return out

    def clear_force(self) -> None:
        self.force = LVector2f(0.0, 0.0)


@dataclass
class TickReport:
    applied: list[InputEvent] = field(default_factory=list)
    dropped: list[InputEvent] = field(default_factory=list)


class Controller:
    """
    Per-tick control step.

    Order inside `step`:
    1) clear persistent forces left from the previous tick
    2) advance the shared impulse cooldown by dt
    3) apply events in emission order (Impulse/Accelerate gated by the cooldown,
       Force/Stabilisation always applied)
    """

    def __init__(self, tuning: ActuationTuning | None = None) -> None:
        self.tuning = tuning if tuning is not None else ActuationTuning()
        self.impulse_cooldown = Cooldown.from_seconds(self.tuning.impulse_cooldown)

    def new_body(self, *, linvel: LVector2f | None = None) -> ControlBody:
        return ControlBody(
            linvel=LVector2f(linvel) if linvel is not None else LVector2f(0.0, 0.0),
            damping=float(self.tuning.default_damping),
        )

    def step(self, dt: float, events: Iterable[InputEvent], bodies: Sequence[ControlBody]) -> TickReport:
        dt = float(dt)
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError(f"Tick delta must be finite and >= 0, got {dt}")

        for body in bodies:
            body.clear_force()
        self.impulse_cooldown.tick(dt)

        report = TickReport()
        for event in events:
            if self._apply(event, bodies):
                report.applied.append(event)
            else:
                report.dropped.append(event)
                logger.debug(
                    "Dropped %s: impulse cooldown %.3fs remaining",
                    type(event).__name__,
                    self.impulse_cooldown.remaining(),
                )
        return report

    def _apply(self, event: InputEvent, bodies: Sequence[ControlBody]) -> bool:
        t = self.tuning
        if isinstance(event, Impulse):
            if not self.impulse_cooldown.ready():
                return False
            self.impulse_cooldown.start()
            impulse = event.direction * float(t.impulse_value)
            for body in bodies:
                body.damping = float(t.default_damping)
                body.request_impulse(impulse)
                body.heat.inc(t.impulse_heat)
            return True
        if isinstance(event, Stabilisation):
            for body in bodies:
                body.damping = float(t.stabilisation_damping)
                body.heat.inc(t.stabilisation_heat)
            return True
        if isinstance(event, Accelerate):
            if not self.impulse_cooldown.ready():
                return False
            self.impulse_cooldown.start()
            for body in bodies:
                body.request_impulse(body.linvel * float(t.acceleration_value))
                body.heat.inc(t.impulse_heat)
            return True
        if isinstance(event, Force):
            force = event.direction * float(t.force_value)
            for body in bodies:
                body.damping = float(t.default_damping)
                body.force = LVector2f(force)
                body.heat.inc(t.force_heat)
            return True
        raise TypeError(f"Unsupported input event: {event!r}")


__all__ = ["ActuationTuning", "ControlBody", "Controller", "TickReport"]
