#!/usr/bin/env python3
"""
Force laws for the spring flock simulator.

Responsibilities
- Quadratic air resistance opposing a velocity.
- Hooke's-law springs between two positions.
- A lateral "oscillation" force perpendicular to the current heading.
- Inverse-square magnetic repulsion with a hard cutoff.
- The "fold into window" transform used to keep the flock focus on screen.

Units and conventions
- Positions are in pixels, velocities in pixels per frame.
- Forces are applied once per frame and divided by mass by the receiver, so a
  force here is "pixels per frame squared times mass".

Numerical notes
- Every direction is taken from Vector2.normalize, which maps the zero vector to
  itself. Coincident points therefore produce zero drag and zero spring force
  instead of a division error.
- Magnetic repulsion is undefined for coincident points; those are skipped.
"""

from typing import Optional
from .constants import DRAG_COEFFICIENT, FLUID_DENSITY, MAGNET_DISTANCE_SCALE, MAGNET_RANGE
from .vector_utils import Vector2, ZERO


def drag_force(velocity: Vector2, area: float,
               drag: float = DRAG_COEFFICIENT, rho: float = FLUID_DENSITY) -> Vector2:
    """
    Air resistance for a body moving at `velocity`.

    F = -1/2 * Cd * rho * A * |v|^2 * v_hat
    """
    fmag = 0.5 * drag * rho * area * velocity.mag_sq()
    return -velocity.normalize() * fmag


def spring_force(position: Vector2, anchor: Vector2, spring_constant: float,
                 spring_length: float) -> Vector2:
    """
    Hooke's-law force on `position` from a spring tied to `anchor`.

    Positive extension (stretched) pulls toward the anchor; negative extension
    (compressed) pushes away. The force is exactly zero at rest length.
    """
    displacement = position - anchor
    extension = displacement.mag() - spring_length
    return displacement.normalize() * (-spring_constant * extension)


def oscillation_force(velocity: Vector2, c: float) -> Vector2:
    """Force perpendicular to `velocity`, scaled by `c` (typically in [-1, 1])."""
    return velocity.perpendicular() * c


def magnetic_repulsion(position: Vector2, source: Vector2, strength: float = 1.0,
                       scale: float = MAGNET_DISTANCE_SCALE,
                       cutoff: Optional[float] = None) -> Vector2:
    """
    Repulsive force on `position` away from `source`.

    The scaled distance is s = |position - source| / scale. Inside the cutoff
    (default MAGNET_RANGE * strength) the force is

        F = (position - source) * strength / s^3

    i.e. magnitude scale * strength / s^2 pointing away from the source. At or
    beyond the cutoff, and at s == 0, the force is zero.
    """
    if cutoff is None:
        cutoff = MAGNET_RANGE * strength
    offset = position - source
    s = offset.mag() / scale
    if s >= cutoff or s == 0:
        return ZERO
    magnitude = 1 / (s * s)
    return offset * (strength * magnitude / s)


def fold_into_window(value: float, bound: float) -> float:
    """
    Fold a coordinate back into [0, bound] in a single pass.

    Negative values are reflected about zero; values above the bound become
    bound - (value mod bound). This is not a wraparound: bound + 1 lands at
    bound - 1, not at 1. Because the mod is taken, any overflow, however
    large, lands in (0, bound]. A window with no extent folds everything to 0.
    """
    if value < 0:
        value = -value
    if bound <= 0:
        return 0.0
    if value > bound:
        value = bound - (value % bound)
    return value
