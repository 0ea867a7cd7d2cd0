import pytest

from springflock.flock import Flock
from springflock.moving_body import MovingBody
from springflock.noise import RandomSource
from springflock.vector_utils import Vector2


@pytest.fixture
def rng():
    return RandomSource(42)


@pytest.fixture
def flock(rng):
    """A 200x100 flock with no members and a fixed seed."""
    return Flock(200, 100, rng)


@pytest.fixture
def still_body():
    """Body at the origin with no velocity and no air resistance."""
    body = MovingBody(Vector2(0, 0))
    body.set_air_resistance(False)
    return body
