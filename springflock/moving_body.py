#!/usr/bin/env python3
"""
MovingBody: a point mass pulled around by springs.

A body carries its own kinematic state, a short history of where it has been,
and a list of other bodies it is tied to by springs. Each frame the owner
accumulates forces with apply_force and then calls update, which advances the
body one semi-implicit Euler step.

Connections are plain references and carry no ownership: removing a body from
a flock leaves any spring that points at it in place until someone removes it.
"""
from collections import deque
from typing import Deque, List, Optional

from . import constants as C
from .data_models import RenderSample
from .physics import drag_force, oscillation_force, spring_force
from .vector_utils import Vector2, ZERO, vec_mean


class MovingBody:
    """
    A point mass with drag, springs and a speed limit.

    The body is modeled as a sphere of diameter `size`: area = pi * size^2 / 4
    and mass equals area, so bigger bodies feel more drag but respond more
    slowly to the same force.

    Args:
        position: Starting position in pixels
        velocity: Starting velocity in pixels per frame
        acceleration: Starting acceleration
        size: Diameter used for area and mass
        max_speed: Hard upper bound on |velocity|
        draw_size: Radius hint for the drawing sink
        history_length: Number of saved positions (at least 2)
    """

    def __init__(self, position: Vector2 = ZERO, velocity: Vector2 = ZERO,
                 acceleration: Vector2 = ZERO, size: float = C.BODY_SIZE,
                 max_speed: float = C.MAX_SPEED, draw_size: float = C.DRAW_SIZE,
                 history_length: int = C.HISTORY_LENGTH):
        self.position = Vector2(*position)
        self.velocity = Vector2(*velocity)
        self.acceleration = Vector2(*acceleration)
        self.area = C.area_for_size(size)
        self.mass = self.area
        self.max_speed = max_speed
        self.draw_size = draw_size

        self.spring_constant = C.DEFAULT_SPRING_CONSTANT
        self.spring_length = C.DEFAULT_SPRING_LENGTH
        self.magnetic_force = C.DEFAULT_MAGNETIC_FORCE
        self.air_resistance = True

        history_length = max(2, int(history_length))
        self.position_history: Deque[Vector2] = deque(
            [self.position] * history_length, maxlen=history_length)
        self.connections: List["MovingBody"] = []
        self.update_count = 0

    def __repr__(self):
        return (f"MovingBody(position=({self.position.x:.2f}, {self.position.y:.2f}), "
                f"speed={self.speed:.2f}, connections={len(self.connections)})")

    @property
    def speed(self) -> float:
        return self.velocity.mag()

    @property
    def history_length(self) -> int:
        return self.position_history.maxlen

    # -----------------------
    # Forces
    # -----------------------

    def apply_force(self, f: Vector2) -> None:
        self.acceleration = self.acceleration + f / self.mass

    def drag_force(self, v: Vector2) -> Vector2:
        return drag_force(v, self.area)

    def apply_air_resistance(self) -> None:
        self.apply_force(self.drag_force(self.velocity))

    def set_air_resistance(self, enabled: bool) -> None:
        self.air_resistance = bool(enabled)

    def spring_force_to(self, other: "MovingBody") -> Vector2:
        return spring_force(self.position, other.position, self.spring_constant, self.spring_length)

    def oscillate(self, c: float) -> None:
        """Push sideways relative to the current heading, scaled by c."""
        self.apply_force(oscillation_force(self.velocity, c))

    # -----------------------
    # Integration
    # -----------------------

    def update(self) -> None:
        """
        Advance one frame.

        Velocity absorbs the accumulated acceleration and is clamped, the
        current position is saved to history, the body moves, and acceleration
        is reset. Drag and spring forces are then computed at the new position
        and left in acceleration, so they act on the next frame's velocity.
        """
        self.velocity = (self.velocity + self.acceleration).limit(self.max_speed)

        self.position_history.append(self.position)

        self.position = self.position + self.velocity
        self.acceleration = ZERO
        if self.air_resistance:
            self.apply_air_resistance()
        for other in self.connections:
            self.apply_force(self.spring_force_to(other))

        self.update_count += 1

    def set_position(self, x: float, y: float) -> None:
        self.position = Vector2(x, y)

    def render_sample(self) -> RenderSample:
        """
        Smoothed positions for drawing.

        Nothing is ready until the body has updated WARMUP_UPDATES times; until
        then both positions are the live position. Afterwards the oldest
        min(SMOOTHING_WINDOW, history_length - 1) saved positions are averaged
        for the current point, and the same window one slot newer for the
        previous point.
        """
        if self.update_count < C.WARMUP_UPDATES:
            return RenderSample(self.position, self.position, False)
        history = list(self.position_history)
        n = min(C.SMOOTHING_WINDOW, len(history) - 1)
        current = vec_mean(history[0:n])
        previous = vec_mean(history[1:n + 1])
        return RenderSample(current, previous, True)

    # -----------------------
    # Connections
    # -----------------------

    def add_connection(self, other: "MovingBody") -> None:
        """Tie a spring from this body to `other`; springs to itself are ignored."""
        if other is self:
            return
        self.connections.append(other)

    def remove_last_connection(self) -> Optional["MovingBody"]:
        if not self.connections:
            return None
        return self.connections.pop()

    def remove_connection(self, other: "MovingBody") -> bool:
        """Drop the first spring to `other`. Returns False if there was none."""
        for i, conn in enumerate(self.connections):
            if conn is other:
                del self.connections[i]
                return True
        return False

    def remove_all_connections_to(self, other: "MovingBody") -> int:
        before = len(self.connections)
        self.connections = [c for c in self.connections if c is not other]
        return before - len(self.connections)

    def get_connected(self, i: int) -> "MovingBody":
        if not 0 <= i < len(self.connections):
            raise IndexError(f"connection index {i} out of range (0..{len(self.connections) - 1})")
        return self.connections[i]

    @property
    def num_connections(self) -> int:
        return len(self.connections)
