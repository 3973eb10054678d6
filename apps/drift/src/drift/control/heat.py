from __future__ import annotations

from dataclasses import dataclass

from panda3d.core import LVector4f


HEAT_MIN = 0.0
HEAT_MAX = 1.0

# Idle tint (orange) and fully heated tint (white-hot red).
_COLD_RGBA = (1.0, 0.65, 0.0, 1.0)
_HOT_RGBA = (1.0, 0.15, 0.1, 1.0)


@dataclass
class HeatState:
    amount: float = 0.0

    def inc(self, delta: float) -> float:
        self.amount = max(HEAT_MIN, min(HEAT_MAX, float(self.amount) + float(delta)))
        return self.amount


def heat_color(amount: float) -> LVector4f:
    """Linear tint between the idle and hot colors; out-of-range input is clamped."""

    t = max(HEAT_MIN, min(HEAT_MAX, float(amount)))
    return LVector4f(*(c0 + (c1 - c0) * t for c0, c1 in zip(_COLD_RGBA, _HOT_RGBA)))


__all__ = ["HEAT_MAX", "HEAT_MIN", "HeatState", "heat_color"]
