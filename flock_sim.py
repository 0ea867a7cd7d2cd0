#!/usr/bin/env python3
"""
Spring flock simulator application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Maintains a shared SimulationController that owns the flocks and the pointer state;
  all access is guarded by a re-entrant lock for thread-safety.
- Acts as the drawing sink for the springflock core: each frame the core hands back
  DrawCommands and the renderer turns them into dots, ellipses or tails.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the viewport),
  stepping the flocks, and drawing. It locks the SimulationController around short critical
  sections to read/update shared state.
- The UI class runs in the main thread via Dear PyGui. Its callbacks invoke
  SimulationController methods, which are lock-protected.

Units and conventions
- Screen pixels throughout; one simulation step per rendered frame.
- Colors are RGBA tuples in 0..255.

Running
1) Install dependencies: `pip install -e .`
2) Run this module: `python flock_sim.py` (or `springflock`)
3) Without windows: `python flock_sim.py --headless-ticks 600`

Viewport controls
- Left click: add a member at the pointer   - Right drag: magnet repels members
- M: cycle draw mode                        - F: focus follows the pointer
- = / -: widen / narrow spring lengths      - ] / [: widen / narrow spring constants
- Backspace: remove last member             - Space: pause/play
"""

import argparse
import logging
import math
import threading
import time
from typing import List, Optional, Tuple

# GUI and Rendering libs
import pygame
import dearpygui.dearpygui as dpg

from springflock.constants import BACKGROUND_COLOR, FOCUS_COLOR, TARGET_FPS, VIEW_HEIGHT, VIEW_WIDTH
from springflock.data_models import DrawCommand, DrawMode, FlockConfig
from springflock.flock import Flock
from springflock.noise import RandomSource
from springflock.presets_loader import list_presets, load_preset
from springflock.vector_utils import clamp

logger = logging.getLogger("springflock.app")

DEFAULT_PRESET = "blue_pink.json"

# ============================================================
# Simulation Controller (Shared State)
# ============================================================

class SimulationController:
    """
    Shared state between UI thread (DearPyGui) and rendering thread (Pygame).
    Includes thread-safe operations guarded by a lock.
    """
    def __init__(self, width: int = VIEW_WIDTH, height: int = VIEW_HEIGHT, seed: Optional[int] = None):
        self.lock = threading.RLock()
        self.width = width
        self.height = height
        self.seed = seed
        self.flock: Optional[Flock] = None
        self.config: Optional[FlockConfig] = None
        self.running = True  # app running
        self.playing = True  # simulation running
        self.pointer: Optional[Tuple[float, float]] = None
        self.magnet_active = False
        self.show_focus = True
        self.frame = 0
        self.last_commands: List[DrawCommand] = []

    def load_config(self, config: FlockConfig, members: Optional[int] = None):
        with self.lock:
            if members is not None:
                config.members = members
            seed = self.seed if self.seed is not None else config.seed
            self.config = config
            self.flock = Flock.from_config(config, self.width, self.height, RandomSource(seed))
            self.last_commands = []
            self.frame = 0
        logger.info("Loaded preset %r (%d members)", config.name, len(self.flock))

    def resize(self, width: int, height: int):
        with self.lock:
            width, height = max(1, width), max(1, height)
            self.width, self.height = width, height
            if self.flock is not None:
                self.flock.width, self.flock.height = width, height

    def step(self) -> List[DrawCommand]:
        """Advance the flock one frame and return what should be drawn."""
        with self.lock:
            flock = self.flock
            if flock is None:
                return []
            if self.magnet_active and self.pointer is not None:
                flock.run_away_from_point(self.pointer)
            self.last_commands = flock.update_and_draw(self.pointer)
            self.frame += 1
            return self.last_commands

    def snapshot(self) -> Tuple[List[DrawCommand], Optional[Tuple[float, float]]]:
        with self.lock:
            if self.flock is None:
                return [], None
            if not self.playing:
                self.last_commands = self.flock.draw()
            return list(self.last_commands), self.flock.focus.position.as_tuple()

    def add_member_at(self, x: float, y: float):
        with self.lock:
            if self.flock is not None:
                self.flock.add_connection(x, y, True)

    def add_members(self, count: int):
        with self.lock:
            if self.flock is None:
                return
            rng = self.flock.rng
            for _ in range(max(0, count)):
                self.flock.add_connection(rng.uniform(0, self.width), rng.uniform(0, self.height), True)

    def remove_last(self):
        with self.lock:
            if self.flock is not None:
                self.flock.remove_last_thing()

    def member_count(self) -> int:
        with self.lock:
            return len(self.flock) if self.flock is not None else 0

    def toggle_mode(self) -> Optional[DrawMode]:
        with self.lock:
            return self.flock.toggle_mode() if self.flock is not None else None

    def toggle_follow_pointer(self) -> bool:
        with self.lock:
            return self.flock.toggle_follow_pointer() if self.flock is not None else False

    def adjust(self, method_name: str, *args):
        """Call a Flock tuning method by name under the lock."""
        with self.lock:
            if self.flock is not None:
                getattr(self.flock, method_name)(*args)

# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: steps the flock, draws its DrawCommands and the focus.
    Handles member placement, the pointer magnet and keyboard tuning.
    """
    def __init__(self, sim: SimulationController):
        super().__init__(daemon=True)
        self.sim = sim
        self.surface = None
        self.overlay = None
        self.clock = None
        self.running = True

    def run(self):
        pygame.init()
        pygame.display.set_caption("Spring Flock - Viewport")
        self.surface = pygame.display.set_mode((self.sim.width, self.sim.height), pygame.RESIZABLE)
        self.overlay = pygame.Surface((self.sim.width, self.sim.height), pygame.SRCALPHA)
        self.clock = pygame.time.Clock()

        while self.running and self.sim.running:
            self.handle_events()

            with self.sim.lock:
                playing = self.sim.playing
            if playing:
                self.sim.step()

            self.draw()
            self.clock.tick(TARGET_FPS)

        pygame.quit()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.sim.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.overlay = pygame.Surface((event.w, event.h), pygame.SRCALPHA)
                self.sim.resize(event.w, event.h)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    self.sim.add_member_at(*event.pos)
                elif event.button == 3:
                    with self.sim.lock:
                        self.sim.magnet_active = True

            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 3:
                    with self.sim.lock:
                        self.sim.magnet_active = False

            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)

        with self.sim.lock:
            self.sim.pointer = pygame.mouse.get_pos() if pygame.mouse.get_focused() else None

    def handle_key(self, key):
        if key == pygame.K_SPACE:
            with self.sim.lock:
                self.sim.playing = not self.sim.playing
        elif key == pygame.K_m:
            mode = self.sim.toggle_mode()
            logger.info("Draw mode: %s", mode.name if mode else None)
        elif key == pygame.K_f:
            following = self.sim.toggle_follow_pointer()
            logger.info("Focus follows pointer: %s", following)
        elif key == pygame.K_EQUALS:
            self.sim.adjust("increase_spring_length_range")
        elif key == pygame.K_MINUS:
            self.sim.adjust("decrease_spring_length_range")
        elif key == pygame.K_RIGHTBRACKET:
            self.sim.adjust("increase_spring_const_range")
        elif key == pygame.K_LEFTBRACKET:
            self.sim.adjust("decrease_spring_const_range")
        elif key == pygame.K_BACKSPACE:
            self.sim.remove_last()

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)
        overlay = self.overlay
        overlay.fill((0, 0, 0, 0))

        commands, focus_pos = self.sim.snapshot()
        for cmd in commands:
            draw_command(overlay, cmd)
        surf.blit(overlay, (0, 0))

        with self.sim.lock:
            show_focus = self.sim.show_focus
            playing = self.sim.playing
            count = len(self.sim.flock) if self.sim.flock is not None else 0
            mode = self.sim.flock.draw_mode.name if self.sim.flock is not None else "-"
        if show_focus and focus_pos is not None:
            pt = _safe_point(focus_pos)
            if pt:
                pygame.draw.circle(surf, FOCUS_COLOR, pt, 3)

        draw_text(surf, "Click: add | Right-drag: magnet | M: mode | F: follow | =/-: lengths | ]/[: stiffness | Space: pause", 10, 10, (200, 200, 200))
        draw_text(surf, f"Members: {count}  Mode: {mode}  [{'Playing' if playing else 'Paused'}]", 10, 30, (200, 200, 200))

        pygame.display.flip()


def draw_command(surface, cmd: DrawCommand):
    """Render one DrawCommand onto an SRCALPHA surface."""
    r, g, b, a = (int(clamp(c, 0, 255)) for c in cmd.color)
    if cmd.mode == DrawMode.TAIL:
        tail_alpha = a // max(1, len(cmd.history))
        width = max(1, int(cmd.draw_size))
        start = _safe_point(cmd.position)
        if start is None:
            return
        for past in cmd.history:
            end = _safe_point(past)
            if end:
                pygame.draw.line(surface, (r, g, b, tail_alpha), start, end, width)
        return

    cur = cmd.sample.smoothed_current
    prev = cmd.sample.smoothed_previous
    center = _safe_point(cur)
    if center is None:
        return
    if cmd.mode == DrawMode.DOT:
        pygame.draw.circle(surface, (r, g, b, a), center, max(1, int(cmd.draw_size / 2)))
        return

    # Ellipse stretched along the direction of travel, longer when faster
    length = max(1, int(cmd.draw_size * cur.dist(prev)))
    width = max(1, int(cmd.draw_size))
    shape = pygame.Surface((length, width), pygame.SRCALPHA)
    pygame.draw.ellipse(shape, (r, g, b, a), shape.get_rect())
    angle = math.degrees(math.atan2(prev.y - cur.y, prev.x - cur.x))
    rotated = pygame.transform.rotate(shape, -angle)
    surface.blit(rotated, rotated.get_rect(center=center))

_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (pygame.error, OSError):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))

SAFE_COORD_LIMIT = 30000

def _safe_point(pt):
    try:
        px, py = pt
        x, y = int(px), int(py)
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: presets, membership, spring ranges, drawing and motion controls.
    """
    def __init__(self, sim: SimulationController):
        self.sim = sim
        self.status_msg_id = None
        self.count_label_id = None
        self._preset_map = {display: fn for fn, display in list_presets()}
        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Spring Flock - Controls', width=460, height=720)

        with self.sim.lock:
            flock = self.sim.flock
            config_name = self.sim.config.name if self.sim.config else ""

        with dpg.window(label="Controls", width=440, height=700, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                items = list(self._preset_map.keys())
                dpg.add_combo(items, default_value=config_name if config_name in items else (items[0] if items else ""),
                              width=220, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_preset(dpg.get_value("preset_combo")))

            dpg.add_separator()
            dpg.add_text("Members")
            with dpg.group(horizontal=True):
                dpg.add_input_int(label="Count", default_value=10, min_value=1, max_value=1000,
                                  min_clamped=True, width=100, tag="add_count_input")
                dpg.add_button(label="Add", callback=self._on_add_members)
                dpg.add_button(label="Remove Last", callback=self._on_remove_last)
            self.count_label_id = dpg.add_text("Members: 0")

            dpg.add_separator()
            dpg.add_text("Springs")
            dpg.add_slider_float(label="Length min", min_value=0.0, max_value=300.0,
                                 default_value=flock.spring_length_min if flock else 30.0, width=220,
                                 callback=lambda s, a, u: self.sim.adjust("set_spring_length_min", a), tag="len_min_slider")
            dpg.add_slider_float(label="Length max", min_value=0.0, max_value=300.0,
                                 default_value=flock.spring_length_max if flock else 60.0, width=220,
                                 callback=lambda s, a, u: self.sim.adjust("set_spring_length_max", a), tag="len_max_slider")
            dpg.add_slider_float(label="Stiffness min", min_value=0.0, max_value=0.1, format="%.4f",
                                 default_value=flock.spring_constant_min if flock else 0.005, width=220,
                                 callback=lambda s, a, u: self.sim.adjust("set_spring_constant_min", a), tag="const_min_slider")
            dpg.add_slider_float(label="Stiffness max", min_value=0.0, max_value=0.1, format="%.4f",
                                 default_value=flock.spring_constant_max if flock else 0.02, width=220,
                                 callback=lambda s, a, u: self.sim.adjust("set_spring_constant_max", a), tag="const_max_slider")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Lengths +", callback=lambda: self._range_edit("increase_spring_length_range"))
                dpg.add_button(label="Lengths -", callback=lambda: self._range_edit("decrease_spring_length_range"))
                dpg.add_button(label="Stiffness +", callback=lambda: self._range_edit("increase_spring_const_range"))
                dpg.add_button(label="Stiffness -", callback=lambda: self._range_edit("decrease_spring_const_range"))

            dpg.add_separator()
            dpg.add_text("Motion")
            dpg.add_slider_float(label="Focus speed", min_value=0.0, max_value=0.02, format="%.4f",
                                 default_value=flock.focus_speed if flock else 0.003, width=220,
                                 callback=lambda s, a, u: self._set_attr("focus_speed", a))
            dpg.add_slider_float(label="Magnetic force", min_value=0.0, max_value=5.0,
                                 default_value=flock.magnetic_force if flock else 1.0, width=220,
                                 callback=lambda s, a, u: self.sim.adjust("set_magnetic_force", a))
            dpg.add_checkbox(label="Focus follows pointer", default_value=flock.follows_pointer if flock else False,
                             callback=lambda s, a, u: self._set_attr("follows_pointer", bool(a)), tag="follow_checkbox")

            dpg.add_separator()
            dpg.add_text("Drawing")
            dpg.add_combo([m.name for m in DrawMode], default_value=flock.draw_mode.name if flock else "ELLIPSE",
                          width=120, callback=lambda s, a, u: self.sim.adjust("set_mode", a), tag="mode_combo")
            dpg.add_slider_float(label="Draw size", min_value=1.0, max_value=40.0,
                                 default_value=flock.draw_size if flock else 10.0, width=220,
                                 callback=lambda s, a, u: self._set_attr("draw_size", a))
            dpg.add_slider_float(label="Speed threshold", min_value=0.0, max_value=9.0,
                                 default_value=flock.speed_threshold if flock else 0.0, width=220,
                                 callback=lambda s, a, u: self._set_attr("speed_threshold", a))
            dpg.add_checkbox(label="Show focus", default_value=True,
                             callback=lambda s, a, u: self._set_show_focus(a))

            dpg.add_separator()
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step ▶", callback=self._step_once)
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _set_attr(self, name: str, value):
        with self.sim.lock:
            if self.sim.flock is not None:
                setattr(self.sim.flock, name, value)

    def _set_show_focus(self, value):
        with self.sim.lock:
            self.sim.show_focus = bool(value)

    def _on_add_members(self):
        count = dpg.get_value("add_count_input")
        self.sim.add_members(count)
        self._set_status(f"Added {count} members.")

    def _on_remove_last(self):
        if self.sim.member_count() == 0:
            self._set_error("Flock is already empty.")
            return
        self.sim.remove_last()
        self._set_status("Removed last member.")

    def _range_edit(self, method_name: str):
        self.sim.adjust(method_name)
        self._sync_sliders()
        self._set_status("Spring ranges reassigned.")

    def _sync_sliders(self):
        with self.sim.lock:
            flock = self.sim.flock
            if flock is None:
                return
            values = (flock.spring_length_min, flock.spring_length_max,
                      flock.spring_constant_min, flock.spring_constant_max,
                      flock.draw_mode.name, flock.follows_pointer)
        for tag, value in zip(("len_min_slider", "len_max_slider", "const_min_slider",
                               "const_max_slider", "mode_combo", "follow_checkbox"), values):
            dpg.set_value(tag, value)

    def _toggle_play(self):
        with self.sim.lock:
            self.sim.playing = not self.sim.playing
            state = "Playing" if self.sim.playing else "Paused"
        self._set_status(f"Simulation {state}.")

    def _step_once(self):
        with self.sim.lock:
            self.sim.playing = False
        self.sim.step()
        self._set_status("Stepped one frame.")

    def load_preset(self, display_name: str):
        fn = self._preset_map.get(display_name)
        config = load_preset(fn) if fn else None
        if config is None:
            self._set_error(f"Failed to load preset '{display_name}'.")
            return
        self.sim.load_config(config)
        self._sync_sliders()
        self._set_status(f"Loaded preset: {config.name}")

    def _sync_ui_with_sim(self):
        """Periodic UI update for values the viewport can change (mode, follow, counts)."""
        dpg.set_value(self.count_label_id, f"Members: {self.sim.member_count()}")
        with self.sim.lock:
            flock = self.sim.flock
            mode = flock.draw_mode.name if flock else None
            follows = flock.follows_pointer if flock else False
        if mode is not None:
            dpg.set_value("mode_combo", mode)
        dpg.set_value("follow_checkbox", follows)
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================

def resolve_config(preset: str) -> FlockConfig:
    """Load a preset by file name or display name; fall back to defaults."""
    config = load_preset(preset)
    if config is None:
        by_display = {display: fn for fn, display in list_presets()}
        if preset in by_display:
            config = load_preset(by_display[preset])
    if config is None:
        logger.warning("Preset %r not found; using defaults", preset)
        config = FlockConfig()
    return config


def run_headless(sim: SimulationController, ticks: int):
    """Step the flock without any window and log its progress."""
    start = time.perf_counter()
    for i in range(ticks):
        sim.step()
        if (i + 1) % 100 == 0 or i + 1 == ticks:
            with sim.lock:
                avg = sim.flock.get_average_pos()
            logger.info("tick %d: average position (%.1f, %.1f)", i + 1, avg.x, avg.y)
    logger.info("Ran %d ticks in %.2fs", ticks, time.perf_counter() - start)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Spring flock simulator")
    parser.add_argument("--preset", default=DEFAULT_PRESET, help="preset file or display name")
    parser.add_argument("--seed", type=int, default=None, help="random seed (overrides the preset)")
    parser.add_argument("--members", type=int, default=None, help="initial member count")
    parser.add_argument("--width", type=int, default=VIEW_WIDTH)
    parser.add_argument("--height", type=int, default=VIEW_HEIGHT)
    parser.add_argument("--headless-ticks", type=int, default=0,
                        help="run this many ticks without windows, then exit")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    sim = SimulationController(args.width, args.height, seed=args.seed)
    sim.load_config(resolve_config(args.preset), members=args.members)

    if args.headless_ticks > 0:
        run_headless(sim, args.headless_ticks)
        return

    renderer = PygameRenderer(sim)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(sim)

    # Keyboard shortcut in UI window to toggle play/pause (Space)
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_down)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        sim.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()

if __name__ == "__main__":
    main()
