"""Random numbers and the numeric helpers of the Math namespace."""

from __future__ import annotations

import math
import random

_UINT32_MAX = 0xFFFFFFFF


class Rng:
    """A seedable source of unsigned 32-bit random integers."""

    def __init__(self, seed: float | None = None) -> None:
        self._random = random.Random(seed)

    def seed(self, value: float) -> float:
        """Reseed the generator and return the seed."""
        self._random.seed(value)
        return value

    def rand(self) -> int:
        """Return a random integer in ``[0, 2**32 - 1]``."""
        return self._random.getrandbits(32)

    def rand2(self, low: int, high: int) -> int:
        """Return a random integer between ``low`` and ``high``, both included."""
        span = high - low
        if span == 0:
            return low
        fraction = self.rand() / (_UINT32_MAX + 1.0)
        if span > 0:
            return low + int((1.0 + span) * fraction)
        return low - int((-span + 1.0) * fraction)

    def randf(self) -> float:
        """Return a random float in ``[-1, 1]``."""
        return 2.0 * self.rand() / _UINT32_MAX - 1.0

    def rand2f(self, low: float, high: float) -> float:
        """Return a random float between ``low`` and ``high``."""
        return low + (high - low) * (self.rand() / _UINT32_MAX)


def abs_int(value: int) -> int:
    """Absolute value of an integer."""
    return abs(int(value))


def sgn(value: float) -> int:
    """Return -1, 0 or 1 following the sign of ``value``."""
    if value < 0.0:
        return -1
    if value > 0.0:
        return 1
    return 0


def fmin(a: float, b: float) -> float:
    """The smaller of two numbers; ``b`` when they compare equal or unordered."""
    return a if a < b else b


def fmax(a: float, b: float) -> float:
    """The larger of two numbers; ``b`` when they compare equal or unordered."""
    return a if a > b else b


def remainder(a: float, b: float) -> float:
    """IEEE 754 remainder of ``a`` divided by ``b``."""
    return math.remainder(a, b)


def power(base: float, exponent: float) -> float:
    """Raise ``base`` to ``exponent``; two integers give an integer result."""
    if isinstance(base, int) and isinstance(exponent, int):
        return int(math.pow(float(base), float(exponent)))
    return math.pow(float(base), float(exponent))