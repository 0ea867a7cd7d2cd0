#!/usr/bin/env python3
"""
Seeded randomness for the simulation.

Two sources drive a flock:
- Coherent 1D noise: smooth, deterministic for a given seed, used for focus
  motion and lateral oscillation.
- Uniform draws: used when assigning spring lengths and constants.

PerlinNoise uses the classic 1D value-noise layout: a lattice of 4096 random
values, cosine interpolation between neighbouring lattice points, and four
octaves each with half the amplitude of the last. The octave amplitudes sum to
0.9375, so results lie in [0, 0.9375). Negative inputs are mirrored, which makes
noise(-x) == noise(x).
"""
import math
import random
from typing import Optional

PERLIN_SIZE = 4095  # lattice mask; the lattice holds PERLIN_SIZE + 1 values
DEFAULT_OCTAVES = 4
DEFAULT_FALLOFF = 0.5


def _cosine_fade(t: float) -> float:
    return 0.5 * (1.0 - math.cos(t * math.pi))


class PerlinNoise:
    """
    One-dimensional multi-octave noise over a seeded lattice.

    Args:
        seed: Seed for the lattice; None draws from system entropy.
        octaves: Number of octaves summed.
        falloff: Amplitude ratio between successive octaves.
    """

    def __init__(self, seed: Optional[int] = None, octaves: int = DEFAULT_OCTAVES,
                 falloff: float = DEFAULT_FALLOFF):
        rng = random.Random(seed)
        self.lattice = [rng.random() for _ in range(PERLIN_SIZE + 1)]
        self.octaves = max(1, int(octaves))
        self.falloff = float(falloff)

    def __call__(self, x: float) -> float:
        return self.noise(x)

    def noise(self, x: float) -> float:
        if x < 0:
            x = -x
        xi = int(x)
        xf = x - xi
        r = 0.0
        ampl = 0.5
        for _ in range(self.octaves):
            n0 = self.lattice[xi & PERLIN_SIZE]
            n1 = self.lattice[(xi + 1) & PERLIN_SIZE]
            r += (n0 + _cosine_fade(xf) * (n1 - n0)) * ampl
            ampl *= self.falloff
            xi <<= 1
            xf *= 2
            if xf >= 1.0:
                xi += 1
                xf -= 1
        return r


class RandomSource:
    """
    Seedable source for uniform draws and coherent noise.

    A flock takes one RandomSource so a single seed pins every random choice
    it makes.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)
        self._noise = PerlinNoise(self._rng.getrandbits(32))

    def uniform(self, low: float, high: float) -> float:
        """Value in [low, high); returns low when the range is empty or inverted."""
        if low >= high:
            return low
        value = high
        while value >= high:
            value = low + self._rng.random() * (high - low)
        return value

    def noise(self, x: float) -> float:
        return self._noise.noise(x)
