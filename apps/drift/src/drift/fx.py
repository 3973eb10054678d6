from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from panda3d.core import LVector2f

from drift.control.input_events import Accelerate, Force, Impulse, InputEvent


FX_EXPLOSION = "explosion"
FX_PROPULSOR = "propulsor"
FX_COLLISION = "collision"


@dataclass(frozen=True)
class EffectSpec:
    kind: str
    lifetime_s: float
    size: float
    rgba: tuple[float, float, float, float]


EFFECT_SPECS: dict[str, EffectSpec] = {
    FX_EXPLOSION: EffectSpec(kind=FX_EXPLOSION, lifetime_s=0.5, size=0.25, rgba=(1.0, 1.0, 0.0, 1.0)),
    FX_PROPULSOR: EffectSpec(kind=FX_PROPULSOR, lifetime_s=0.5, size=0.10, rgba=(1.0, 0.6, 0.0, 1.0)),
    FX_COLLISION: EffectSpec(kind=FX_COLLISION, lifetime_s=0.3, size=0.05, rgba=(0.5, 0.5, 0.5, 1.0)),
}


@dataclass(frozen=True)
class EffectRequest:
    kind: str
    pos: LVector2f


def effects_for_events(events: Iterable[InputEvent], *, body_pos: LVector2f, radius: float) -> list[EffectRequest]:
    """Cosmetic one-shots for applied events; thrust effects spawn behind the body."""

    out: list[EffectRequest] = []
    for event in events:
        if isinstance(event, Impulse):
            out.append(EffectRequest(kind=FX_EXPLOSION, pos=LVector2f(body_pos - event.direction * float(radius))))
        elif isinstance(event, Accelerate):
            out.append(EffectRequest(kind=FX_EXPLOSION, pos=LVector2f(body_pos)))
        elif isinstance(event, Force):
            out.append(EffectRequest(kind=FX_PROPULSOR, pos=LVector2f(body_pos - event.direction * float(radius))))
    return out


def collision_effect(*, body_pos: LVector2f) -> EffectRequest:
    return EffectRequest(kind=FX_COLLISION, pos=LVector2f(body_pos))


__all__ = [
    "EFFECT_SPECS",
    "EffectRequest",
    "EffectSpec",
    "FX_COLLISION",
    "FX_EXPLOSION",
    "FX_PROPULSOR",
    "collision_effect",
    "effects_for_events",
]
