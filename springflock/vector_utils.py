#!/usr/bin/env python3
"""
Vector helpers for 2D operations.

Vector2 is a small immutable value type used for every position, velocity,
acceleration and force in the simulation. Bodies never mutate a vector in
place; they rebind their attributes to new vectors.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Tuple


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Vector2":
        return Vector2(self.x * s, self.y * s)

    __rmul__ = __mul__

    def __truediv__(self, s: float) -> "Vector2":
        return Vector2(self.x / s, self.y / s)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def mag(self) -> float:
        return math.hypot(self.x, self.y)

    def mag_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalize(self) -> "Vector2":
        """Unit vector in the same direction; the zero vector maps to itself."""
        l = self.mag()
        if l == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / l, self.y / l)

    def limit(self, max_mag: float) -> "Vector2":
        """Scale down to max_mag if longer; shorter vectors are returned unchanged."""
        if self.mag() > max_mag:
            return self.normalize() * max_mag
        return self

    def perpendicular(self) -> "Vector2":
        """Rotate a quarter turn: (x, y) -> (-y, x)."""
        return Vector2(-self.y, self.x)

    def dist(self, other: "Vector2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


ZERO = Vector2(0.0, 0.0)


def vec_mean(points: Iterable[Vector2]) -> Vector2:
    """Arithmetic mean of a non-empty sequence of vectors."""
    sx, sy, n = 0.0, 0.0, 0
    for p in points:
        sx += p.x
        sy += p.y
        n += 1
    if n == 0:
        raise ValueError("vec_mean() of an empty sequence")
    return Vector2(sx / n, sy / n)
