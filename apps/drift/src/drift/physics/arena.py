from __future__ import annotations

from dataclasses import dataclass, field

from panda3d.core import LVector2f


@dataclass(frozen=True)
class Arena:
    half_width: float = 6.0
    half_height: float = 3.0
    restitution: float = 0.9


@dataclass
class ArenaBody:
    pos: LVector2f = field(default_factory=lambda: LVector2f(0.0, 0.0))
    vel: LVector2f = field(default_factory=lambda: LVector2f(0.0, 0.0))
    mass: float = 1.0
    radius: float = 0.3
    touching_wall: bool = False


def integrate(
    body: ArenaBody,
    *,
    arena: Arena,
    dt: float,
    impulse: LVector2f | None,
    force: LVector2f,
    damping: float,
) -> bool:
    """
    Advance one body by dt (semi-implicit Euler) and bounce it off the arena walls.

    Returns True when a wall contact started this tick.
    """

    dt = max(0.0, float(dt))
    inv_mass = 1.0 / max(1e-6, float(body.mass))
    vel = LVector2f(body.vel)
    if impulse is not None:
        vel += impulse * inv_mass
    vel += force * (inv_mass * dt)
    vel *= 1.0 / (1.0 + dt * max(0.0, float(damping)))
    pos = LVector2f(body.pos + vel * dt)

    hit = False
    lim_x = max(0.0, float(arena.half_width) - float(body.radius))
    lim_y = max(0.0, float(arena.half_height) - float(body.radius))
    if abs(pos.x) > lim_x:
        pos.x = lim_x if pos.x > 0.0 else -lim_x
        vel.x = -vel.x * float(arena.restitution)
        hit = True
    if abs(pos.y) > lim_y:
        pos.y = lim_y if pos.y > 0.0 else -lim_y
        vel.y = -vel.y * float(arena.restitution)
        hit = True

    started = hit and not body.touching_wall
    body.touching_wall = hit
    body.pos = pos
    body.vel = vel
    return started


__all__ = ["Arena", "ArenaBody", "integrate"]
