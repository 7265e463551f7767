"""Forward stereo audio samples to a visualiser over OSC."""

from __future__ import annotations

from .osc import OscOut


class LeBiniou:
    """A stereo pass-through that sends every frame as an OSC message."""

    PATH = "/lebiniou/audioinput"

    def __init__(self, host: str = "localhost", port: int = 9999) -> None:
        self._out = OscOut(host, port)

    def tick(self, left: float, right: float) -> tuple[float, float]:
        """Send one frame and return it unchanged."""
        self._out.add_float(left).add_float(right).send(self.PATH)
        return left, right

    def close(self) -> None:
        """Release the underlying sender."""
        self._out.close()

    def __enter__(self) -> LeBiniou:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()