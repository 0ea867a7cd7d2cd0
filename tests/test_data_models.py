import pytest

from springflock.data_models import ColorRange, DrawMode, FlockConfig


@pytest.mark.parametrize("hue, expected", [
    (0.0, (0, 90, 118, 230)),
    (1.0, (255, 110, 138, 180)),
    (0.5, (127, 100, 128, 205)),
])
def test_default_color_ramp(hue, expected):
    assert ColorRange().color_for(hue) == expected


def test_draw_mode_parse():
    assert DrawMode.parse("dot") == DrawMode.DOT
    assert DrawMode.parse(" Tail ") == DrawMode.TAIL
    assert DrawMode.parse(1) == DrawMode.ELLIPSE
    assert DrawMode.parse(DrawMode.TAIL) is DrawMode.TAIL
    with pytest.raises(KeyError):
        DrawMode.parse("spiral")


def test_draw_mode_next_wraps():
    assert DrawMode.TAIL.next() == DrawMode.DOT


def test_clamped_config():
    cfg = FlockConfig(members=-3, spring_length_min=-10, spring_length_max=-20,
                      spring_constant_min=0.5, spring_constant_max=0.1,
                      draw_size=1e6, max_speed=-1).clamped()
    assert cfg.members == 0
    assert (cfg.spring_length_min, cfg.spring_length_max) == (0, 0)
    assert (cfg.spring_constant_min, cfg.spring_constant_max) == (0.5, 0.5)
    assert cfg.draw_size == 500
    assert cfg.max_speed == 0


def test_clamped_returns_a_copy():
    cfg = FlockConfig(members=-1)
    cfg.clamped()
    assert cfg.members == -1
