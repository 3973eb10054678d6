from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from panda3d.core import LVector2f


# Left stick magnitude below this counts as "no direction" on release.
STICK_DEAD_ZONE = 0.15

_ZERO_EPS = 1e-12


def _unit_direction(direction: LVector2f, kind: str) -> LVector2f:
    v = LVector2f(direction)
    if v.lengthSquared() <= _ZERO_EPS:
        raise ValueError(f"{kind} event requires a non-zero direction")
    # Already-unit vectors are kept bit-exact so recorded logs replay identically.
    if abs(v.lengthSquared() - 1.0) > 1e-6:
        v.normalize()
    return v


@dataclass(frozen=True)
class Impulse:
    direction: LVector2f

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", _unit_direction(self.direction, "Impulse"))


@dataclass(frozen=True)
class Force:
    direction: LVector2f

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", _unit_direction(self.direction, "Force"))


@dataclass(frozen=True)
class Stabilisation:
    pass


@dataclass(frozen=True)
class Accelerate:
    pass


InputEvent = Union[Impulse, Force, Stabilisation, Accelerate]


@dataclass(frozen=True)
class InputSnapshot:
    """Raw device state sampled once per tick."""

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False
    brake: bool = False
    boost: bool = False
    pad_south: bool = False
    stick_x: float = 0.0
    stick_y: float = 0.0


def keyboard_direction(snapshot: InputSnapshot) -> LVector2f:
    direction = LVector2f(0.0, 0.0)
    if snapshot.up:
        direction += LVector2f(0.0, 1.0)
    if snapshot.down:
        direction += LVector2f(0.0, -1.0)
    if snapshot.left:
        direction += LVector2f(-1.0, 0.0)
    if snapshot.right:
        direction += LVector2f(1.0, 0.0)
    if direction.lengthSquared() > _ZERO_EPS:
        direction.normalize()
    return direction


def stick_direction(snapshot: InputSnapshot) -> LVector2f:
    stick = LVector2f(float(snapshot.stick_x), float(snapshot.stick_y))
    if stick.length() < STICK_DEAD_ZONE:
        return LVector2f(0.0, 0.0)
    stick.normalize()
    return stick


def _is_zero(v: LVector2f) -> bool:
    return v.lengthSquared() <= _ZERO_EPS


def decode_input_events(prev: InputSnapshot, cur: InputSnapshot) -> list[InputEvent]:
    """
    Turn two consecutive raw snapshots into the ordered semantic events for this tick.

    Keyboard: boost press -> Accelerate, brake press -> Stabilisation, brake release fires
    an Impulse along the held arrows, and held arrows push a Force while the brake is up.
    Gamepad: south press -> Stabilisation, south release fires an Impulse along the stick.
    """

    events: list[InputEvent] = []

    if cur.boost and not prev.boost:
        events.append(Accelerate())
    if cur.brake and not prev.brake:
        events.append(Stabilisation())

    direction = keyboard_direction(cur)
    if prev.brake and not cur.brake and not _is_zero(direction):
        events.append(Impulse(direction))
    if not cur.brake and not _is_zero(direction):
        events.append(Force(direction))

    if cur.pad_south and not prev.pad_south:
        events.append(Stabilisation())
    if prev.pad_south and not cur.pad_south:
        stick = stick_direction(cur)
        if not _is_zero(stick):
            events.append(Impulse(stick))

    return events


def event_name(event: InputEvent) -> str:
    return type(event).__name__.lower()


def event_to_dict(event: InputEvent) -> dict:
    out: dict = {"kind": event_name(event)}
    if isinstance(event, (Impulse, Force)):
        out["dir"] = [float(event.direction.x), float(event.direction.y)]
    return out


def event_from_dict(row: dict) -> InputEvent:
    if not isinstance(row, dict):
        raise ValueError(f"Invalid event payload: {row!r}")
    kind = str(row.get("kind") or "")
    if kind == "stabilisation":
        return Stabilisation()
    if kind == "accelerate":
        return Accelerate()
    if kind in ("impulse", "force"):
        raw = row.get("dir")
        if not isinstance(raw, (list, tuple)) or len(raw) != 2:
            raise ValueError(f"Event {kind!r} is missing a 2D direction")
        direction = LVector2f(float(raw[0]), float(raw[1]))
        return Impulse(direction) if kind == "impulse" else Force(direction)
    raise ValueError(f"Unknown event kind: {kind!r}")


__all__ = [
    "Accelerate",
    "Force",
    "Impulse",
    "InputEvent",
    "InputSnapshot",
    "STICK_DEAD_ZONE",
    "Stabilisation",
    "decode_input_events",
    "event_from_dict",
    "event_name",
    "event_to_dict",
    "keyboard_direction",
    "stick_direction",
]
