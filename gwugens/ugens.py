"""Simple unit generators processing one sample per tick."""

from __future__ import annotations


class UGen:
    """Base unit generator: passes its input through and remembers the output."""

    def __init__(self) -> None:
        self.last = 0.0

    def tick(self, sample: float = 0.0) -> float:
        """Process one input sample and return the output."""
        self.last = sample
        return sample


class Gain(UGen):
    """Scale the input by a gain factor."""

    def __init__(self, gain: float = 1.0) -> None:
        super().__init__()
        self.gain = gain

    def tick(self, sample: float = 0.0) -> float:
        self.last = sample * self.gain
        return self.last


class Impulse(UGen):
    """Emit ``next`` once, then zeros until it is set again."""

    def __init__(self) -> None:
        super().__init__()
        self.next = 0.0

    def tick(self, sample: float = 0.0) -> float:
        self.last = self.next
        self.next = 0.0
        return self.last


class FullRect(UGen):
    """Full-wave rectifier."""

    def tick(self, sample: float = 0.0) -> float:
        self.last = abs(sample)
        return self.last


class HalfRect(UGen):
    """Half-wave rectifier: negative input becomes zero."""

    def tick(self, sample: float = 0.0) -> float:
        self.last = sample if sample > 0 else 0.0
        return self.last


class Step(UGen):
    """Output a constant value."""

    def __init__(self, next: float = 0.0) -> None:
        super().__init__()
        self.next = next

    def tick(self, sample: float = 0.0) -> float:
        self.last = self.next
        return self.last


class ZeroX(UGen):
    """Output 1 when the input's sign equals the previous sample's sign, else 0."""

    def __init__(self) -> None:
        super().__init__()
        self._previous = 1.0

    def tick(self, sample: float = 0.0) -> float:
        sign = -1.0 if sample < 0 else (1.0 if sample > 0 else 0.0)
        self.last = 1.0 if self._previous == sign else 0.0
        self._previous = sign
        return self.last