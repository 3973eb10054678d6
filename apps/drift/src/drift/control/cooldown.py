from __future__ import annotations

import math


class Cooldown:
    """
    Restartable countdown used to rate-limit discrete actions.

    A fresh cooldown is already finished, so the gated action is available at startup.
    """

    def __init__(self, duration: float) -> None:
        duration = float(duration)
        if duration < 0.0:
            raise ValueError(f"Cooldown duration must be >= 0, got {duration}")
        self.duration = duration
        self.elapsed = duration

    @classmethod
    def from_seconds(cls, seconds: float) -> "Cooldown":
        return cls(seconds)

    def start(self) -> None:
        self.elapsed = 0.0

    def tick(self, dt: float) -> bool:
        dt = float(dt)
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError(f"Cooldown tick delta must be finite and >= 0, got {dt}")
        # Saturate: an idle cooldown never wraps around into a new cycle.
        self.elapsed = min(self.duration, self.elapsed + dt)
        return self.ready()

    def ready(self) -> bool:
        return self.elapsed >= self.duration

    def remaining(self) -> float:
        return max(0.0, self.duration - self.elapsed)

    def __repr__(self) -> str:
        return f"Cooldown(duration={self.duration:.3f}, elapsed={self.elapsed:.3f})"


__all__ = ["Cooldown"]
