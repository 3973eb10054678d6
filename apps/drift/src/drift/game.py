from __future__ import annotations

import logging
from dataclasses import dataclass

from direct.gui.OnscreenText import OnscreenText
from direct.showbase.ShowBase import ShowBase
from panda3d.core import (
    AmbientLight,
    ClockObject,
    DirectionalLight,
    GamepadButton,
    InputDevice,
    LVector2f,
    LVector4f,
    NodePath,
    TextNode,
    loadPrcFileData,
)

from drift.app_config import RunConfig
from drift.common.error_log import ErrorLog
from drift.control.actuation import Controller
from drift.control.heat import heat_color
from drift.control.input_events import InputSnapshot, decode_input_events
from drift.fx import EFFECT_SPECS, EffectRequest, collision_effect, effects_for_events
from drift.physics.arena import Arena, ArenaBody, integrate
from drift.replays.event_log import EventLog, append_frame, new_event_log, save_event_log
from drift.settings import Settings, load_settings, save_settings


logger = logging.getLogger(__name__)

PLAYER_RADIUS = 0.3
# Upper bound on a single tick so a stalled frame cannot tunnel through a wall.
MAX_TICK_DT = 0.05

_KEY_BINDINGS = [
    ("arrow_up", "up"),
    ("arrow_down", "down"),
    ("arrow_left", "left"),
    ("arrow_right", "right"),
    ("space", "brake"),
    ("a", "boost"),
]


@dataclass
class _LiveEffect:
    node: NodePath
    left: float
    lifetime: float


def read_gamepad(device) -> dict[str, float | bool]:
    """South face button and left stick of a Panda3D gamepad, as InputSnapshot fields."""

    if device is None:
        return {}
    return {
        "pad_south": bool(device.findButton(GamepadButton.face_a()).pressed),
        "stick_x": float(device.findAxis(InputDevice.Axis.left_x).value),
        "stick_y": float(device.findAxis(InputDevice.Axis.left_y).value),
    }


class DriftApp(ShowBase):
    def __init__(self, cfg: RunConfig) -> None:
        loadPrcFileData("", "audio-library-name null")
        if cfg.smoke:
            loadPrcFileData("", "window-type offscreen")

        super().__init__()

        self.disableMouse()
        self.cfg = cfg
        self.settings: Settings = load_settings(cfg.settings_path)
        self.arena = Arena()
        self.errors = ErrorLog(persist_path=cfg.error_log_path)

        self.controller = Controller(self.settings.tuning)
        self.control_body = self.controller.new_body()
        self.player = ArenaBody(radius=PLAYER_RADIUS)
        self.recording: EventLog | None = (
            new_event_log(tuning=self.settings.tuning) if cfg.record_path is not None else None
        )

        self._keys = {name: False for _, name in _KEY_BINDINGS}
        self._prev_snapshot = InputSnapshot()
        self._effects: list[_LiveEffect] = []
        self._clock = ClockObject.getGlobalClock()
        # Pending changes written onto the next recorded frame.
        self._tuning_dirty = False
        self._reset_pending = False

        self.gamepad = None
        gamepads = self.devices.getDevices(InputDevice.DeviceClass.gamepad)
        if gamepads:
            self._connect_gamepad(gamepads[0])

        self._setup_scene()
        self._setup_input()
        self._setup_ui()

        self.taskMgr.add(self._update, "update-loop")
        self.exitFunc = self._on_exit
        logger.info("Drift started (settings=%s, recording=%s)", cfg.settings_path, cfg.record_path)

        if cfg.smoke:
            self._frames_left = 8
            self.taskMgr.add(self._smoke_task, "smoke-exit")

    def _setup_scene(self) -> None:
        hw = self.arena.half_width
        hh = self.arena.half_height
        wall = 0.1
        for sx, sy, x, y in [
            (hw, wall, 0.0, hh),
            (hw, wall, 0.0, -hh),
            (wall, hh, -hw, 0.0),
            (wall, hh, hw, 0.0),
        ]:
            border = self._box(sx, sy, 0.1)
            border.setPos(x, y, 0.0)
            border.setColor(1, 1, 1, 1, 1)

        self.player_model = self._box(PLAYER_RADIUS * 1.15, PLAYER_RADIUS * 0.85, PLAYER_RADIUS * 0.5)
        self.player_model.setColor(heat_color(0.0), 1)

        self.camera.setPos(0.0, 0.0, 14.0)
        self.camera.setHpr(0.0, -90.0, 0.0)

        ambient = AmbientLight("ambient")
        ambient.setColor(LVector4f(0.35, 0.35, 0.35, 1))
        self.render.setLight(self.render.attachNewNode(ambient))
        sun = DirectionalLight("sun")
        sun.setColor(LVector4f(0.8, 0.8, 0.8, 1))
        sun_np = self.render.attachNewNode(sun)
        sun_np.setHpr(30, -60, 0)
        self.render.setLight(sun_np)

    def _box(self, sx: float, sy: float, sz: float) -> NodePath:
        # models/box spans [0, 1]; recentre so scale acts as half extents.
        pivot = self.render.attachNewNode("box")
        model = self.loader.loadModel("models/box")
        model.reparentTo(pivot)
        model.setPos(-0.5, -0.5, -0.5)
        pivot.setScale(sx * 2.0, sy * 2.0, sz * 2.0)
        return pivot

    def _setup_input(self) -> None:
        for key, name in _KEY_BINDINGS:
            self.accept(key, self._set_key, [name, True])
            self.accept(f"{key}-up", self._set_key, [name, False])

        self.accept("connect-device", self._connect_gamepad)
        self.accept("disconnect-device", self._disconnect_gamepad)
        self.accept("escape", self.userExit)
        self.accept("r", self._reset_player)
        self.accept("f3", self._toggle_flag, ["show_debug"])
        self.accept("f4", self._toggle_flag, ["show_effects"])
        self.accept("f5", self._save_settings)

        self.accept("bracketleft", self._adjust_tuning, ["impulse_value", -1.0])
        self.accept("bracketright", self._adjust_tuning, ["impulse_value", 1.0])
        self.accept("comma", self._adjust_tuning, ["force_value", -0.5])
        self.accept("period", self._adjust_tuning, ["force_value", 0.5])
        self.accept("semicolon", self._adjust_tuning, ["stabilisation_damping", -0.5])
        self.accept("apostrophe", self._adjust_tuning, ["stabilisation_damping", 0.5])

    def _setup_ui(self) -> None:
        self._debug_text = OnscreenText(
            text="",
            parent=self.aspect2d,
            pos=(-1.32, 0.9),
            align=TextNode.ALeft,
            scale=0.045,
            fg=(1, 1, 1, 1),
            shadow=(0, 0, 0, 0.6),
        )

    def _set_key(self, name: str, pressed: bool) -> None:
        self._keys[name] = pressed

    def _snapshot(self) -> InputSnapshot:
        return InputSnapshot(**self._keys, **read_gamepad(self.gamepad))

    def _connect_gamepad(self, device) -> None:
        if self.gamepad is not None or device.device_class != InputDevice.DeviceClass.gamepad:
            return
        self.gamepad = device
        self.attachInputDevice(device, prefix="gamepad")
        logger.info("Gamepad connected: %s", device.name)

    def _disconnect_gamepad(self, device) -> None:
        if self.gamepad != device:
            return
        self.detachInputDevice(device)
        self.gamepad = None
        logger.info("Gamepad disconnected: %s", device.name)

    def _reset_player(self) -> None:
        logger.info("Player reset")
        self.player = ArenaBody(radius=PLAYER_RADIUS)
        self.control_body = self.controller.new_body()
        self._reset_pending = True

    def _toggle_flag(self, name: str) -> None:
        setattr(self.settings.flags, name, not getattr(self.settings.flags, name))

    def _adjust_tuning(self, name: str, delta: float) -> None:
        current = getattr(self.settings.tuning, name)
        setattr(self.settings.tuning, name, max(0.0, current + delta))
        self._tuning_dirty = True

    def _save_settings(self) -> None:
        save_settings(self.settings, self.cfg.settings_path)

    def _update(self, task):  # type: ignore[no-untyped-def]
        try:
            self._tick(min(self._clock.getDt(), MAX_TICK_DT))
        except Exception as exc:
            self.errors.record(context="update-loop", exc=exc)
        return task.cont

    def _tick(self, dt: float) -> None:
        snapshot = self._snapshot()
        events = decode_input_events(self._prev_snapshot, snapshot)
        self._prev_snapshot = snapshot

        self.control_body.linvel = LVector2f(self.player.vel)
        report = self.controller.step(dt, events, [self.control_body])
        if self.recording is not None:
            append_frame(
                self.recording,
                dt=dt,
                linvel=self.control_body.linvel,
                events=events,
                tuning=self.settings.tuning if self._tuning_dirty else None,
                reset=self._reset_pending,
            )
        self._tuning_dirty = False
        self._reset_pending = False

        contact = integrate(
            self.player,
            arena=self.arena,
            dt=dt,
            impulse=self.control_body.take_impulse(),
            force=self.control_body.force,
            damping=self.control_body.damping,
        )

        if self.settings.flags.show_effects:
            requests = effects_for_events(report.applied, body_pos=self.player.pos, radius=PLAYER_RADIUS)
            if contact:
                requests.append(collision_effect(body_pos=self.player.pos))
            for req in requests:
                self._spawn_effect(req)
        self._update_effects(dt)

        self.player_model.setPos(self.player.pos.x, self.player.pos.y, 0.0)
        self.player_model.setColor(heat_color(self.control_body.heat.amount), 1)
        self._update_debug_text()

    def _spawn_effect(self, req: EffectRequest) -> None:
        spec = EFFECT_SPECS[req.kind]
        node = self._box(spec.size, spec.size, spec.size)
        node.setPos(req.pos.x, req.pos.y, 0.2)
        node.setColor(LVector4f(*spec.rgba), 1)
        node.setTransparency(True)
        self._effects.append(_LiveEffect(node=node, left=spec.lifetime_s, lifetime=spec.lifetime_s))

    def _update_effects(self, dt: float) -> None:
        alive: list[_LiveEffect] = []
        for fx in self._effects:
            fx.left -= dt
            if fx.left <= 0.0:
                fx.node.removeNode()
                continue
            fx.node.setAlphaScale(fx.left / fx.lifetime)
            alive.append(fx)
        self._effects = alive

    def _update_debug_text(self) -> None:
        if not self.settings.flags.show_debug:
            self._debug_text.setText("")
            return

        tuning = self.settings.tuning
        cd = self.controller.impulse_cooldown
        lines = [
            "Arrows push | Space brake (release fires impulse) | A boost | R reset",
            "Gamepad: hold south to brake, release to fire along the left stick",
            "F3 HUD | F4 effects | F5 save JSON",
            "[ / ] impulse | , / . force | ; / ' brake damping",
            "",
            f"Speed: {self.player.vel.length():.2f}",
            f"Heat: {self.control_body.heat.amount:.2f}",
            f"Cooldown: {'READY' if cd.ready() else f'{cd.remaining():.2f}s'}",
            f"Damping: {self.control_body.damping:.1f}",
            f"Impulse: {tuning.impulse_value:.1f}",
            f"Force: {tuning.force_value:.1f}",
            f"Brake damping: {tuning.stabilisation_damping:.1f}",
        ]
        last_error = self.errors.last_summary()
        if last_error:
            lines.append(f"Error: {last_error}")
        self._debug_text.setText("\n".join(lines))

    def _on_exit(self) -> None:
        if self.recording is not None and self.cfg.record_path is not None:
            save_event_log(self.recording, self.cfg.record_path)

    def _smoke_task(self, task):  # type: ignore[no-untyped-def]
        self._frames_left -= 1
        if self._frames_left <= 0:
            self.userExit()
            return task.done
        return task.cont


def run(cfg: RunConfig) -> None:
    app = DriftApp(cfg)
    app.run()


__all__ = ["DriftApp", "PLAYER_RADIUS", "run"]
