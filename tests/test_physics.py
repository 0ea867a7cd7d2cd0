import pytest

from springflock.constants import DRAG_COEFFICIENT
from springflock.physics import (
    drag_force,
    fold_into_window,
    magnetic_repulsion,
    oscillation_force,
    spring_force,
)
from springflock.vector_utils import Vector2, ZERO


def test_spring_force_zero_at_rest_length():
    f = spring_force(Vector2(50, 0), Vector2(0, 0), 0.01, 50)
    assert f == ZERO


def test_spring_force_stretched_pulls_toward_anchor():
    f = spring_force(Vector2(50, 0), Vector2(0, 0), 0.01, 30)
    assert f.x == pytest.approx(-0.2)
    assert f.y == pytest.approx(0.0)


def test_spring_force_compressed_pushes_away():
    f = spring_force(Vector2(0, 10), Vector2(0, 0), 0.5, 30)
    assert f.x == pytest.approx(0.0)
    assert f.y == pytest.approx(10.0)


def test_spring_force_coincident_points_is_zero():
    assert spring_force(Vector2(5, 5), Vector2(5, 5), 0.5, 30) == ZERO


def test_drag_force_opposes_velocity():
    area = 7.0
    f = drag_force(Vector2(3, 4), area)
    expected_mag = 0.5 * DRAG_COEFFICIENT * area * 25
    assert f.mag() == pytest.approx(expected_mag)
    assert f.x == pytest.approx(-0.6 * expected_mag)
    assert f.y == pytest.approx(-0.8 * expected_mag)


def test_drag_force_zero_velocity():
    assert drag_force(ZERO, 7.0) == ZERO


def test_oscillation_force_is_perpendicular():
    f = oscillation_force(Vector2(2, 0), -0.5)
    assert f == Vector2(0, -1)


def test_magnetic_repulsion_hard_cutoff():
    source = Vector2(0, 0)
    # scaled distance is |d| / 10, cutoff at 2
    assert magnetic_repulsion(Vector2(20, 0), source) == ZERO
    assert magnetic_repulsion(Vector2(25, 0), source) == ZERO
    inside = magnetic_repulsion(Vector2(19.9, 0), source)
    assert inside.x > 0
    assert inside.y == 0


def test_magnetic_repulsion_grows_as_distance_shrinks():
    source = Vector2(0, 0)
    mags = [magnetic_repulsion(Vector2(d, 0), source).mag() for d in (18, 12, 6, 2)]
    assert mags == sorted(mags)
    assert len(set(mags)) == len(mags)
    # magnitude = 10 / s^2 at unit strength
    assert magnetic_repulsion(Vector2(10, 0), source).mag() == pytest.approx(10.0)


def test_magnetic_repulsion_strength_scales_cutoff_and_force():
    source = Vector2(0, 0)
    assert magnetic_repulsion(Vector2(30, 0), source, strength=1.0) == ZERO
    f = magnetic_repulsion(Vector2(30, 0), source, strength=2.0)
    assert f.mag() == pytest.approx(2.0 * 10 / 9)


def test_magnetic_repulsion_coincident_is_zero():
    assert magnetic_repulsion(Vector2(3, 3), Vector2(3, 3)) == ZERO


@pytest.mark.parametrize("value, bound, expected", [
    (50, 100, 50),
    (0, 100, 0),
    (100, 100, 100),
    (-30, 100, 30),
    (110, 100, 90),
    (250, 100, 50),
    (-130, 100, 70),
])
def test_fold_into_window(value, bound, expected):
    assert fold_into_window(value, bound) == pytest.approx(expected)


@pytest.mark.parametrize("value", [-5, 0, 7])
def test_fold_into_empty_window(value):
    assert fold_into_window(value, 0) == 0
