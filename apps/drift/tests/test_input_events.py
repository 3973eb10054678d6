from __future__ import annotations

import math

import pytest
from panda3d.core import LVector2f

from drift.control.input_events import (
    Accelerate,
    Force,
    Impulse,
    InputSnapshot,
    Stabilisation,
    decode_input_events,
    event_from_dict,
    event_to_dict,
    keyboard_direction,
)


def test_force_emitted_every_tick_while_arrow_held() -> None:
    held = InputSnapshot(right=True)
    first = decode_input_events(InputSnapshot(), held)
    second = decode_input_events(held, held)
    for events in (first, second):
        assert len(events) == 1
        assert isinstance(events[0], Force)
        assert events[0].direction.x == pytest.approx(1.0)
        assert events[0].direction.y == pytest.approx(0.0)


def test_diagonal_holds_combine_into_unit_vector() -> None:
    d = keyboard_direction(InputSnapshot(up=True, right=True))
    assert d.length() == pytest.approx(1.0)
    assert d.x == pytest.approx(math.sqrt(0.5))
    assert d.y == pytest.approx(math.sqrt(0.5))


def test_opposite_holds_never_produce_force() -> None:
    cur = InputSnapshot(up=True, down=True)
    assert decode_input_events(InputSnapshot(), cur) == []
    assert decode_input_events(cur, cur) == []
    assert decode_input_events(InputSnapshot(), InputSnapshot(left=True, right=True)) == []


def test_brake_press_stabilises_and_suppresses_force() -> None:
    events = decode_input_events(InputSnapshot(up=True), InputSnapshot(up=True, brake=True))
    assert events == [Stabilisation()]

    held = InputSnapshot(up=True, brake=True)
    assert decode_input_events(held, held) == []


def test_brake_release_fires_impulse_then_force() -> None:
    events = decode_input_events(InputSnapshot(left=True, brake=True), InputSnapshot(left=True))
    assert [type(e) for e in events] == [Impulse, Force]
    assert events[0].direction.x == pytest.approx(-1.0)


def test_brake_release_without_direction_fires_nothing() -> None:
    assert decode_input_events(InputSnapshot(brake=True), InputSnapshot()) == []


def test_boost_is_edge_triggered() -> None:
    assert decode_input_events(InputSnapshot(), InputSnapshot(boost=True)) == [Accelerate()]
    assert decode_input_events(InputSnapshot(boost=True), InputSnapshot(boost=True)) == []


def test_gamepad_release_fires_impulse_along_stick() -> None:
    prev = InputSnapshot(pad_south=True, stick_x=0.0, stick_y=0.5)
    cur = InputSnapshot(pad_south=False, stick_x=0.0, stick_y=0.5)
    events = decode_input_events(prev, cur)
    assert len(events) == 1
    assert isinstance(events[0], Impulse)
    assert events[0].direction.y == pytest.approx(1.0)


def test_gamepad_release_inside_dead_zone_fires_nothing() -> None:
    prev = InputSnapshot(pad_south=True, stick_x=0.05, stick_y=0.0)
    cur = InputSnapshot(stick_x=0.05, stick_y=0.0)
    assert decode_input_events(prev, cur) == []
    assert decode_input_events(InputSnapshot(), InputSnapshot(pad_south=True)) == [Stabilisation()]


def test_direction_events_reject_zero_vectors() -> None:
    with pytest.raises(ValueError):
        Impulse(LVector2f(0.0, 0.0))
    with pytest.raises(ValueError):
        Force(LVector2f(0.0, 0.0))


def test_direction_events_are_normalized() -> None:
    ev = Force(LVector2f(3.0, 4.0))
    assert ev.direction.length() == pytest.approx(1.0)
    assert ev.direction.x == pytest.approx(0.6)


def test_event_dict_codec_preserves_kind_and_direction() -> None:
    src = Impulse(LVector2f(0.0, -1.0))
    back = event_from_dict(event_to_dict(src))
    assert isinstance(back, Impulse)
    assert back.direction == src.direction
    assert event_from_dict({"kind": "stabilisation"}) == Stabilisation()


def test_event_from_dict_rejects_bad_payloads() -> None:
    with pytest.raises(ValueError):
        event_from_dict({"kind": "teleport"})
    with pytest.raises(ValueError):
        event_from_dict({"kind": "force"})
    with pytest.raises(ValueError):
        event_from_dict({"kind": "impulse", "dir": [0.0, 0.0]})
