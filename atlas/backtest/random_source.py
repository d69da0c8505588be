"""
Random sources for the simulated backtest.

Return paths must be reproducible for a given (holding, start year), so the
engine draws from an explicit source instead of a global generator. The
default is a Park-Miller minimal-standard LCG; tests substitute a fixed
sequence.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable, List, Protocol

LCG_MULTIPLIER = 16807
LCG_MODULUS = 2147483647  # 2**31 - 1

# u1 feeds log() in Box-Muller; keep it off zero.
_MIN_UNIFORM = 1e-12


class RandomSource(Protocol):
    def uniform(self) -> float:
        """Next draw in [0, 1)."""
        ...


class LCGRandom:
    """Park-Miller generator: ``s = s * 16807 mod (2**31 - 1)``."""

    def __init__(self, seed: int):
        state = int(seed) % LCG_MODULUS
        if state == 0:
            raise ValueError("LCG seed must not be a multiple of 2**31 - 1")
        self.state = state

    def uniform(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER) % LCG_MODULUS
        return (self.state - 1) / (LCG_MODULUS - 1)


class SequenceRandom:
    """Replays a fixed list of draws, cycling when exhausted."""

    def __init__(self, values: Iterable[float]):
        self.values: List[float] = [float(v) for v in values]
        if not self.values:
            raise ValueError("SequenceRandom needs at least one value")
        self._pos = 0

    def uniform(self) -> float:
        value = self.values[self._pos % len(self.values)]
        self._pos += 1
        return value


RandomFactory = Callable[[int], RandomSource]


def box_muller(source: RandomSource) -> float:
    """One standard normal variate from two uniform draws (cosine branch)."""
    u1 = max(source.uniform(), _MIN_UNIFORM)
    u2 = source.uniform()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
