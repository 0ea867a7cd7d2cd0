#!/usr/bin/env python3
"""
Flock: many MovingBodies sprung to one shared, wandering focus.

Responsibilities
- Own the focus body and an ordered list of members.
- Drive the per-frame sequence: move the focus, then for each member in order
  apply a noise-driven sideways push and integrate it.
- Keep spring lengths and constants inside the configured ranges, reassigning
  every member whenever a range changes.
- Apply magnetic repulsion from a point or from another body.
- Turn members into DrawCommands for whatever sink draws them.

Determinism
- All randomness comes from the flock's RandomSource. Two flocks built from the
  same seed and driven by the same calls produce identical states.
- The oscillation phase advances once per member, not once per frame, so the
  effective noise sampling rate grows with the flock size.

Threading
- A Flock is not thread-safe. The application guards it with a lock and every
  frame runs to completion before the next begins.
"""
import logging
import math
from dataclasses import replace
from typing import List, Optional, Tuple, Union

from . import constants as C
from .data_models import ColorRange, DrawCommand, DrawMode, FlockConfig
from .moving_body import MovingBody
from .noise import RandomSource
from .physics import fold_into_window, magnetic_repulsion
from .vector_utils import Vector2, ZERO, vec_mean

logger = logging.getLogger(__name__)

Point = Union[Vector2, Tuple[float, float]]


class Flock:
    """
    A collection of MovingBodies all following a common focus.

    Args:
        width: Window width in pixels; bounds for focus motion
        height: Window height in pixels
        rng: Random source; a fresh unseeded one when omitted
        focus_seed_x: Starting noise phase for the focus x coordinate
        focus_seed_y: Starting noise phase for the focus y coordinate
        focus_speed: Noise phase step per focus move
        oscillation_seed: Starting noise phase for member oscillation
    """

    def __init__(self, width: float = C.VIEW_WIDTH, height: float = C.VIEW_HEIGHT,
                 rng: Optional[RandomSource] = None,
                 focus_seed_x: Optional[float] = None, focus_seed_y: Optional[float] = None,
                 focus_speed: float = C.FOCUS_SPEED, oscillation_seed: Optional[float] = None):
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else RandomSource()

        lo, hi = C.SEED_RANGE
        self.focus_phase_x = focus_seed_x if focus_seed_x is not None else self.rng.uniform(lo, hi)
        self.focus_phase_y = focus_seed_y if focus_seed_y is not None else self.rng.uniform(lo, hi)
        self.focus_speed = focus_speed
        self.oscillation_phase = oscillation_seed if oscillation_seed is not None else self.rng.uniform(lo, hi)

        self.spring_length_min = C.SPRING_LENGTH_MIN
        self.spring_length_max = C.SPRING_LENGTH_MAX
        self.spring_constant_min = C.SPRING_CONSTANT_MIN
        self.spring_constant_max = C.SPRING_CONSTANT_MAX
        self.magnetic_force = C.DEFAULT_MAGNETIC_FORCE

        self.draw_mode = DrawMode.ELLIPSE
        self.draw_size = C.DRAW_SIZE
        self.body_size = C.BODY_SIZE
        self.max_speed = C.MAX_SPEED
        self.speed_threshold = C.SPEED_THRESHOLD
        self.colors = ColorRange()

        self.follows_pointer = False
        self.auto_move_focus = True

        self.focus = MovingBody(Vector2(width / 2, height / 2), ZERO, ZERO, self.body_size,
                                self.max_speed, self.draw_size)
        self.members: List[MovingBody] = []

    @classmethod
    def from_config(cls, config: FlockConfig, width: float = C.VIEW_WIDTH,
                    height: float = C.VIEW_HEIGHT, rng: Optional[RandomSource] = None) -> "Flock":
        """Build a flock from a preset, placing `config.members` bodies around the focus."""
        config = config.clamped()
        if rng is None:
            rng = RandomSource(config.seed)
        flock = cls(width, height, rng,
                    focus_seed_x=config.focus_seed_x,
                    focus_seed_y=config.focus_seed_y,
                    focus_speed=config.focus_speed,
                    oscillation_seed=config.oscillation_seed)
        flock.spring_length_min = config.spring_length_min
        flock.spring_length_max = config.spring_length_max
        flock.spring_constant_min = config.spring_constant_min
        flock.spring_constant_max = config.spring_constant_max
        flock.magnetic_force = config.magnetic_force
        flock.draw_mode = config.mode
        flock.draw_size = config.draw_size
        flock.body_size = config.body_size
        flock.max_speed = config.max_speed
        flock.speed_threshold = config.speed_threshold
        flock.follows_pointer = config.follows_pointer
        flock.colors = config.colors

        cx, cy = flock.focus.position
        for _ in range(config.members):
            angle = rng.uniform(0.0, 2 * math.pi)
            r = rng.uniform(config.spring_length_min, config.spring_length_max)
            flock.add_connection(cx + r * math.cos(angle), cy + r * math.sin(angle), True)
        logger.info("Built flock %r with %d members", config.name, len(flock))
        return flock

    def __len__(self):
        return len(self.members)

    def size(self) -> int:
        return len(self.members)

    # -----------------------
    # Membership
    # -----------------------

    def _random_spring_length(self) -> float:
        frac = self.rng.uniform(0.0, 1.0)
        return math.sqrt(frac) * (self.spring_length_max - self.spring_length_min) + self.spring_length_min

    def _random_spring_constant(self) -> float:
        return self.rng.uniform(self.spring_constant_min, self.spring_constant_max)

    def add_connection(self, x: float, y: float, connect_to_focus: bool = True) -> MovingBody:
        """
        Create a member at (x, y), optionally springing it to the focus.

        The spring length is sqrt(u) * (max - min) + min for uniform u, which
        biases lengths toward the upper bound so members spread evenly over the
        annulus around the focus rather than bunching near its inner edge.
        """
        body = MovingBody(Vector2(x, y), ZERO, ZERO, self.body_size, self.max_speed, self.draw_size)
        body.magnetic_force = self.magnetic_force
        if connect_to_focus:
            body.add_connection(self.focus)
        body.spring_length = self._random_spring_length()
        body.spring_constant = self._random_spring_constant()
        self.members.append(body)
        logger.debug("Added member %d at (%.1f, %.1f)", len(self.members) - 1, x, y)
        return body

    def remove_last_thing(self, prune_connections: bool = False) -> Optional[MovingBody]:
        """
        Remove the most recently added member; no-op when empty.

        Springs other bodies hold to the removed member stay in place unless
        `prune_connections` is set.
        """
        if not self.members:
            return None
        removed = self.members.pop()
        if prune_connections:
            for body in [self.focus] + self.members:
                body.remove_all_connections_to(removed)
        logger.debug("Removed member %d", len(self.members))
        return removed

    def get_member(self, i: int) -> MovingBody:
        if not 0 <= i < len(self.members):
            raise IndexError(f"member index {i} out of range (0..{len(self.members) - 1})")
        return self.members[i]

    def set_focus(self, new_focus: MovingBody) -> None:
        """Follow a new focus. Springs to the old focus are kept."""
        self.focus = new_focus
        for body in self.members:
            body.add_connection(new_focus)

    def get_average_pos(self) -> Vector2:
        if not self.members:
            return self.focus.position
        return vec_mean(m.position for m in self.members)

    # -----------------------
    # Focus motion
    # -----------------------

    def set_within_window(self, body: MovingBody, x: float, y: float) -> None:
        body.set_position(fold_into_window(x, self.width), fold_into_window(y, self.height))

    def move_focus(self) -> None:
        """Advance the focus one step along its noise path."""
        x = 3 * self.width * self.rng.noise(self.focus_phase_x) - self.width
        y = 3 * self.height * self.rng.noise(self.focus_phase_y) - self.height
        self.set_within_window(self.focus, x, y)
        self.focus_phase_x += self.focus_speed
        self.focus_phase_y += self.focus_speed

    def move_focus_to(self, x: float, y: float) -> None:
        self.focus.set_position(x, y)

    def toggle_follow_pointer(self) -> bool:
        self.follows_pointer = not self.follows_pointer
        return self.follows_pointer

    def _advance_focus(self, pointer: Optional[Point]) -> None:
        if self.follows_pointer:
            if pointer is not None:
                x, y = pointer
                self.focus.set_position(x, y)
        elif self.auto_move_focus:
            self.move_focus()

    # -----------------------
    # Per-frame update
    # -----------------------

    def _step_member(self, i: int, body: MovingBody) -> None:
        body.oscillate(2 * self.rng.noise(self.oscillation_phase + i) - 1)
        body.update()
        self.oscillation_phase += C.OSCILLATION_STEP

    def update(self, pointer: Optional[Point] = None) -> None:
        """Move the focus, then oscillate and integrate every member in order."""
        self._advance_focus(pointer)
        for i, body in enumerate(self.members):
            self._step_member(i, body)

    def update_and_draw(self, pointer: Optional[Point] = None) -> List[DrawCommand]:
        """Like update, but also collects a DrawCommand per visible member."""
        self._advance_focus(pointer)
        commands = []
        for i, body in enumerate(self.members):
            body.draw_size = self.draw_size
            self._step_member(i, body)
            cmd = self.draw_command_for(body)
            if cmd is not None:
                commands.append(cmd)
        return commands

    # -----------------------
    # Drawing
    # -----------------------

    def draw(self) -> List[DrawCommand]:
        """DrawCommands for the current state without moving anything."""
        commands = []
        for body in self.members:
            cmd = self.draw_command_for(body)
            if cmd is not None:
                commands.append(cmd)
        return commands

    def draw_command_for(self, body: MovingBody) -> Optional[DrawCommand]:
        """
        Color and shape for one body, or None if it should not be drawn.

        Bodies slower than speed_threshold, or still warming up, are skipped.
        The color is interpolated at hue = speed / max_speed.
        """
        speed = body.speed
        if speed < self.speed_threshold:
            return None
        sample = body.render_sample()
        if not sample.ready:
            return None
        hue = speed / body.max_speed if body.max_speed > 0 else 0.0
        return DrawCommand(
            sample=sample,
            position=body.position,
            history=tuple(body.position_history),
            color=self.colors.color_for(hue),
            draw_size=body.draw_size,
            mode=self.draw_mode,
        )

    def toggle_mode(self) -> DrawMode:
        self.draw_mode = self.draw_mode.next()
        return self.draw_mode

    def set_mode(self, mode) -> None:
        self.draw_mode = DrawMode.parse(mode)

    def set_color_range_rgba(self, r_min: int, r_max: int, g_min: int, g_max: int,
                             b_min: int, b_max: int, a_min: int, a_max: int) -> None:
        self.colors = ColorRange((r_min, r_max), (g_min, g_max), (b_min, b_max), (a_min, a_max))

    def set_alpha_range(self, a_min: int, a_max: int) -> None:
        self.colors = replace(self.colors, alpha=(a_min, a_max))

    # -----------------------
    # Magnetic repulsion
    # -----------------------

    def run_away_from_point(self, point: Point) -> None:
        """Repel members within 2 scaled units of `point` (unit strength)."""
        source = Vector2(*point)
        for body in self.members:
            body.apply_force(magnetic_repulsion(body.position, source, 1.0, cutoff=C.MAGNET_RANGE))

    def run_away_from_body(self, thing: MovingBody) -> None:
        """Repel members from `thing`, scaled by its magnetic_force."""
        m = thing.magnetic_force
        for body in self.members:
            body.apply_force(magnetic_repulsion(body.position, thing.position, m, cutoff=C.MAGNET_RANGE * m))

    def run_away_from(self, thing: Union[MovingBody, Point]) -> None:
        if isinstance(thing, MovingBody):
            self.run_away_from_body(thing)
        else:
            self.run_away_from_point(thing)

    def set_magnetic_force(self, m: float) -> None:
        self.magnetic_force = m
        for body in self.members:
            body.magnetic_force = m

    # -----------------------
    # Spring ranges
    # -----------------------

    def _reassign_constants(self) -> None:
        for body in self.members:
            body.spring_constant = self._random_spring_constant()
        logger.debug("Spring constants reassigned in [%g, %g]",
                     self.spring_constant_min, self.spring_constant_max)

    def re_spring(self) -> None:
        """Draw a fresh spring length for every member from the current range."""
        for body in self.members:
            body.spring_length = self._random_spring_length()
        logger.debug("Spring lengths reassigned in [%g, %g]",
                     self.spring_length_min, self.spring_length_max)

    def increase_spring_const_range(self) -> None:
        """Widen the constant range by lowering its lower bound."""
        self.spring_constant_min /= C.SPRING_CONSTANT_STEP
        self._reassign_constants()

    def decrease_spring_const_range(self) -> None:
        """Narrow the constant range by raising its lower bound, never past the upper."""
        self.spring_constant_min *= C.SPRING_CONSTANT_STEP
        if self.spring_constant_min > self.spring_constant_max:
            self.spring_constant_min = self.spring_constant_max
        self._reassign_constants()

    def set_spring_constant_min(self, s: float) -> None:
        self.spring_constant_min = min(max(0.0, s), self.spring_constant_max)
        self._reassign_constants()

    def set_spring_constant_max(self, s: float) -> None:
        self.spring_constant_max = max(s, self.spring_constant_min, 0.0)
        self._reassign_constants()

    def set_spring_length_min(self, d: float) -> None:
        self.spring_length_min = min(max(0.0, d), self.spring_length_max)
        self.re_spring()

    def set_spring_length_max(self, d: float) -> None:
        self.spring_length_max = max(d, self.spring_length_min)
        self.re_spring()

    def increase_spring_length_range(self) -> None:
        self.spring_length_min = max(0.0, self.spring_length_min - C.SPRING_LENGTH_STEP)
        self.spring_length_max += C.SPRING_LENGTH_STEP
        self.re_spring()

    def decrease_spring_length_range(self) -> None:
        """
        Narrow the length range by 10 at each end.

        A range already narrower than SPRING_LENGTH_MIN_WIDTH is shifted down by
        10 instead (both bounds floored at 0).
        """
        if self.spring_length_max - self.spring_length_min < C.SPRING_LENGTH_MIN_WIDTH:
            self.spring_length_min = max(0.0, self.spring_length_min - C.SPRING_LENGTH_STEP)
            self.spring_length_max = max(0.0, self.spring_length_max - C.SPRING_LENGTH_STEP)
        else:
            self.spring_length_min += C.SPRING_LENGTH_STEP
            self.spring_length_max -= C.SPRING_LENGTH_STEP
        self.re_spring()
