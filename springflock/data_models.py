#!/usr/bin/env python3
"""
Data models for the spring flock simulator.

This module defines the small value types shared between the physics core and
the drawing sink, plus the FlockConfig tunables loaded from presets.

Units and usage
- Positions are in pixels; speeds are in pixels per frame.
- Colors are RGBA tuples in 0..255.
- A DrawCommand is everything a sink needs to draw one body for one frame; the
  core never touches pixels.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from . import constants as C
from .vector_utils import Vector2, clamp

RGBA = Tuple[int, int, int, int]


class DrawMode(Enum):
    """Shape a sink uses for each body."""
    DOT = 0
    ELLIPSE = 1
    TAIL = 2

    def next(self) -> "DrawMode":
        members = list(DrawMode)
        return members[(members.index(self) + 1) % len(members)]

    @classmethod
    def parse(cls, value) -> "DrawMode":
        """Accept a DrawMode, its name (any case) or its integer value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls[value.strip().upper()]
        return cls(int(value))


@dataclass
class ColorRange:
    """
    RGBA interpolation endpoints.

    Each channel is a (at_rest, at_max_speed) pair. The "min" end is not
    required to be numerically smaller; the default alpha fades from 230 to 180.
    """
    red: Tuple[int, int] = C.RED_RANGE
    green: Tuple[int, int] = C.GREEN_RANGE
    blue: Tuple[int, int] = C.BLUE_RANGE
    alpha: Tuple[int, int] = C.ALPHA_RANGE

    def color_for(self, hue: float) -> RGBA:
        """
        Interpolate every channel at `hue` (speed / max speed).

        Channels are truncated toward zero after scaling the span, then offset
        by the rest value: int(hue * (max - min)) + min.
        """
        return (
            int(hue * (self.red[1] - self.red[0])) + self.red[0],
            int(hue * (self.green[1] - self.green[0])) + self.green[0],
            int(hue * (self.blue[1] - self.blue[0])) + self.blue[0],
            int(hue * (self.alpha[1] - self.alpha[0])) + self.alpha[0],
        )


@dataclass(frozen=True)
class RenderSample:
    """
    Smoothed positions for one body.

    Fields:
    - smoothed_current: Mean of the oldest saved positions
    - smoothed_previous: The same window shifted one slot toward the newest
    - ready: False while the body is still warming up
    """
    smoothed_current: Vector2
    smoothed_previous: Vector2
    ready: bool


@dataclass(frozen=True)
class DrawCommand:
    """One body's drawing instructions for a single frame."""
    sample: RenderSample
    position: Vector2
    history: Tuple[Vector2, ...]
    color: RGBA
    draw_size: float
    mode: DrawMode


@dataclass
class FlockConfig:
    """
    Tunables for one flock.

    Fields mirror the JSON preset schema (see presets_loader). Seeds left as
    None are drawn from the flock's random source.
    """
    name: str = "Default"
    description: str = ""
    seed: Optional[int] = None
    members: int = 0
    spring_length_min: float = C.SPRING_LENGTH_MIN
    spring_length_max: float = C.SPRING_LENGTH_MAX
    spring_constant_min: float = C.SPRING_CONSTANT_MIN
    spring_constant_max: float = C.SPRING_CONSTANT_MAX
    magnetic_force: float = C.DEFAULT_MAGNETIC_FORCE
    focus_speed: float = C.FOCUS_SPEED
    focus_seed_x: Optional[float] = None
    focus_seed_y: Optional[float] = None
    oscillation_seed: Optional[float] = None
    body_size: float = C.BODY_SIZE
    draw_size: float = C.DRAW_SIZE
    max_speed: float = C.MAX_SPEED
    speed_threshold: float = C.SPEED_THRESHOLD
    mode: DrawMode = DrawMode.ELLIPSE
    follows_pointer: bool = False
    colors: ColorRange = field(default_factory=ColorRange)

    def clamped(self) -> "FlockConfig":
        """Copy with the range invariants enforced (min <= max, nothing negative)."""
        length_min = max(0.0, self.spring_length_min)
        length_max = max(length_min, self.spring_length_max)
        const_min = max(0.0, self.spring_constant_min)
        const_max = max(const_min, self.spring_constant_max)
        return replace(
            self,
            members=max(0, int(self.members)),
            spring_length_min=length_min,
            spring_length_max=length_max,
            spring_constant_min=const_min,
            spring_constant_max=const_max,
            body_size=max(1e-6, self.body_size),
            max_speed=max(0.0, self.max_speed),
            draw_size=clamp(self.draw_size, 0.0, 500.0),
        )
