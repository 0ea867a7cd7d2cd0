import math

import pytest

from springflock.constants import HISTORY_LENGTH, WARMUP_UPDATES
from springflock.moving_body import MovingBody
from springflock.vector_utils import Vector2, ZERO


def cruising_body():
    """Body at the origin drifting one pixel per frame along x, no forces."""
    body = MovingBody(Vector2(0, 0), Vector2(1, 0))
    body.set_air_resistance(False)
    return body


def test_mass_and_area_from_size():
    body = MovingBody(size=4)
    assert body.area == pytest.approx(math.pi * 4)
    assert body.mass == body.area


def test_history_seeded_with_initial_position():
    body = MovingBody(Vector2(3, 4))
    assert len(body.position_history) == HISTORY_LENGTH
    assert all(p == Vector2(3, 4) for p in body.position_history)


def test_history_lags_one_update_behind():
    body = cruising_body()
    body.update()
    body.update()
    assert len(body.position_history) == HISTORY_LENGTH
    assert body.position_history[-1] == Vector2(1, 0)
    assert body.position_history[-2] == Vector2(0, 0)
    assert body.position == Vector2(2, 0)


def test_history_drops_oldest_exactly_once_per_update():
    body = cruising_body()
    for _ in range(12):
        body.update()
    assert [p.x for p in body.position_history] == [float(x) for x in range(2, 12)]
    assert body.position == Vector2(12, 0)


def test_velocity_clamped_to_max_speed():
    body = MovingBody(Vector2(0, 0), ZERO, Vector2(30, 40), max_speed=9)
    body.update()
    assert body.velocity.mag() == pytest.approx(9)
    assert body.velocity.x == pytest.approx(5.4)
    assert body.velocity.y == pytest.approx(7.2)


@pytest.mark.parametrize("force", [Vector2(0.1, 0), Vector2(500, -300), Vector2(-2e4, 1e4)])
def test_speed_never_exceeds_max(force):
    body = MovingBody(Vector2(0, 0), size=2, max_speed=6)
    for _ in range(20):
        body.apply_force(force)
        body.update()
        assert body.speed <= 6 + 1e-9


def test_slow_body_is_not_clamped():
    body = MovingBody(Vector2(0, 0), Vector2(1, 1), max_speed=9)
    body.set_air_resistance(False)
    body.update()
    assert body.velocity == Vector2(1, 1)


def test_apply_force_divides_by_mass():
    body = MovingBody(size=2)
    body.apply_force(Vector2(body.mass * 2, 0))
    assert body.acceleration.x == pytest.approx(2)


def test_spring_to_focus_after_one_update():
    focus = MovingBody(Vector2(0, 0))
    body = MovingBody(Vector2(50, 0))
    body.set_air_resistance(False)
    body.spring_length = 30
    body.spring_constant = 0.01
    body.add_connection(focus)

    body.update()

    assert body.position == Vector2(50, 0)
    force = body.acceleration * body.mass
    assert force.mag() == pytest.approx(0.01 * 20)
    assert force.x < 0
    assert force.y == pytest.approx(0.0)


def test_drag_lands_in_next_acceleration():
    body = MovingBody(Vector2(0, 0), Vector2(2, 0))
    body.update()
    # -1/2 * 0.05 * 1.0 * A * |v|^2 / m with m == A
    assert body.acceleration.x == pytest.approx(-0.1)
    assert body.acceleration.y == pytest.approx(0.0)


def test_drag_skipped_when_air_resistance_off():
    body = cruising_body()
    body.update()
    assert body.acceleration == ZERO


def test_oscillate_pushes_sideways():
    body = MovingBody(Vector2(0, 0), Vector2(1, 0))
    body.oscillate(0.5)
    assert body.acceleration.x == pytest.approx(0.0)
    assert body.acceleration.y == pytest.approx(0.5 / body.mass)


def test_oscillate_at_rest_does_nothing(still_body):
    still_body.oscillate(1.0)
    assert still_body.acceleration == ZERO


def test_render_sample_warmup():
    body = cruising_body()
    for i in range(WARMUP_UPDATES):
        assert body.render_sample().ready is False
        body.update()
    assert body.render_sample().ready is True
    body.update()
    assert body.render_sample().ready is True


def test_render_sample_not_ready_returns_live_position():
    body = MovingBody(Vector2(7, 8))
    sample = body.render_sample()
    assert sample.smoothed_current == Vector2(7, 8)
    assert sample.smoothed_previous == Vector2(7, 8)


def test_render_sample_averages_oldest_window():
    body = cruising_body()
    for _ in range(12):
        body.update()
    # history x = 2..11; average 2..10 and 3..11
    sample = body.render_sample()
    assert sample.smoothed_current.x == pytest.approx(6)
    assert sample.smoothed_previous.x == pytest.approx(7)
    assert sample.smoothed_current.y == 0


def test_render_sample_with_short_history():
    body = MovingBody(Vector2(0, 0), Vector2(1, 0), history_length=4)
    body.set_air_resistance(False)
    for _ in range(6):
        body.update()
    # history x = 2..5, window of 3
    sample = body.render_sample()
    assert sample.smoothed_current.x == pytest.approx(3)
    assert sample.smoothed_previous.x == pytest.approx(4)


def test_connections_allow_duplicates_and_ignore_self():
    a, b = MovingBody(), MovingBody()
    a.add_connection(b)
    a.add_connection(b)
    a.add_connection(a)
    assert a.num_connections == 2
    assert a.get_connected(0) is b


def test_remove_last_connection():
    a, b, c = MovingBody(), MovingBody(), MovingBody()
    a.add_connection(b)
    a.add_connection(c)
    assert a.remove_last_connection() is c
    assert a.connections == [b]
    a.remove_last_connection()
    assert a.remove_last_connection() is None
    assert a.num_connections == 0


def test_remove_connection_by_value():
    a, b, c = MovingBody(), MovingBody(), MovingBody()
    a.add_connection(b)
    a.add_connection(c)
    a.add_connection(b)
    assert a.remove_connection(b) is True
    assert a.connections == [c, b]
    assert a.remove_connection(MovingBody()) is False
    assert a.num_connections == 2


def test_get_connected_out_of_range():
    a = MovingBody()
    a.add_connection(MovingBody())
    with pytest.raises(IndexError):
        a.get_connected(1)
    with pytest.raises(IndexError):
        a.get_connected(-1)


def test_update_count():
    body = MovingBody()
    for _ in range(3):
        body.update()
    assert body.update_count == 3
