#!/usr/bin/env python3
"""
Shared constants for the spring flock simulator (pixel and frame units).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Distances are in pixels, time is measured in
frames, and a velocity is pixels moved per frame.
"""
import math

# Air resistance
DRAG_COEFFICIENT = 0.05
FLUID_DENSITY = 1.0

# Moving body defaults
DEFAULT_SPRING_CONSTANT = 0.052
DEFAULT_SPRING_LENGTH = 30.0
DEFAULT_MAGNETIC_FORCE = 1.0
HISTORY_LENGTH = 10  # saved positions used for smoothing and tails
SMOOTHING_WINDOW = 10  # upper bound on positions averaged per sample
WARMUP_UPDATES = 5  # frames before a new body is drawn


def area_for_size(size: float) -> float:
    """Cross-section of a sphere of diameter `size`; also used as its mass."""
    return size * size / 4 * math.pi


# Flock defaults
FOCUS_SPEED = 0.003  # noise phase step per focus move
OSCILLATION_STEP = 0.01  # noise phase step per member per tick
SEED_RANGE = (-1000.0, 1000.0)
SPRING_LENGTH_MIN = 30.0
SPRING_LENGTH_MAX = 60.0
SPRING_CONSTANT_MIN = 0.005
SPRING_CONSTANT_MAX = 0.02
SPRING_CONSTANT_STEP = 1.1  # factor applied to the lower bound by range edits
SPRING_LENGTH_STEP = 10.0
SPRING_LENGTH_MIN_WIDTH = 20.0  # narrower ranges shift instead of shrinking
BODY_SIZE = 3.0
DRAW_SIZE = 10.0
MAX_SPEED = 9.0
SPEED_THRESHOLD = 0.0

# Magnetic repulsion
MAGNET_DISTANCE_SCALE = 10.0
MAGNET_RANGE = 2.0  # in scaled distance units

# Default color ranges (blue to pink), (at rest, at max speed)
RED_RANGE = (0, 255)
GREEN_RANGE = (90, 110)
BLUE_RANGE = (118, 138)
ALPHA_RANGE = (230, 180)

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (10, 12, 18)
FOCUS_COLOR = (255, 255, 0)
TARGET_FPS = 60
