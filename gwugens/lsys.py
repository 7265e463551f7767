"""A tiny L-system language producing base-36 symbol sequences.

Code such as ``a|a:ab|b:a`` holds an axiom followed by ``|``-separated
rules ``symbol:replacement``. Symbols are the base-36 digits ``0-9a-z``;
a symbol without a rule expands to nothing.
"""

from __future__ import annotations

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_ENTRIES = len(_DIGITS) + 1


class LSystemNotInitiated(Exception):
    """Raised when output is requested before any code was parsed."""


def _symbol_value(char: str) -> int:
    value = _DIGITS.find(char) if len(char) == 1 else -1
    if value < 0:
        raise ValueError(f"invalid L-system symbol: {char!r}")
    return value


def _rules(code: str) -> list[str]:
    """Return the expansion text of the axiom (entry 0) and of each symbol."""
    starts = [1] * _ENTRIES
    ends = [0] + [1] * (_ENTRIES - 1)
    reading_key = False
    current = 0
    for pos in range(1, len(code) + 2):
        char = code[pos - 1] if pos <= len(code) else ""
        if reading_key and char == ":":
            current = _symbol_value(code[pos - 2]) + 1
            starts[current] = pos + 1
            reading_key = False
        elif not reading_key and char == "|":
            ends[current] = pos
            reading_key = True
    ends[current] = len(code) + 1
    return [code[start - 1:end - 1] if end > start else "" for start, end in zip(starts, ends)]


def _expand(code: str, order: int) -> list[int]:
    if order < 1:
        raise ValueError("order must be at least 1")
    rules = _rules(code)
    text = rules[0]
    for _ in range(order - 1):
        text = "".join(rules[_symbol_value(char) + 1] for char in text)
    return [_symbol_value(char) for char in text]


class LSystem:
    """Step through an L-system's symbols, one per trigger."""

    def __init__(self) -> None:
        self._symbols: list[int] | None = None
        self._cursor = 0
        self._pos = 0

    def parse(self, order: int, code: str) -> None:
        """Compile ``code`` and expand it to the given order."""
        self._symbols = _expand(code, order)
        self._cursor = 0
        self._pos = 0

    def reset(self) -> None:
        """Move the read position back to the first symbol."""
        if self._symbols is not None:
            self._cursor = 0

    def size(self) -> int:
        """Number of symbols, or -1 when nothing was parsed."""
        return -1 if self._symbols is None else len(self._symbols)

    def _next(self) -> int:
        if self._pos == 0:
            self._cursor = 0
        value = self._symbols[self._cursor]
        self._cursor += 1
        self._pos = (self._pos + 1) % len(self._symbols)
        return value

    def get(self) -> str:
        """Read one full cycle of symbols as a string."""
        if self._symbols is None:
            raise LSystemNotInitiated("L-system has not been parsed")
        return "".join(_DIGITS[self._next()] for _ in range(len(self._symbols)))

    def tick(self, trigger: float) -> float:
        """Output the next symbol's value when ``trigger`` is non-zero, else 0."""
        if self._symbols is None or not trigger or not self._symbols:
            return 0.0
        return float(self._next())


def generate(code: str, order: int) -> str:
    """Expand ``code`` to ``order`` and return the resulting string."""
    system = LSystem()
    system.parse(order, code)
    return system.get()