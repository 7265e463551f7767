"""Live-sampling unit generator with several looping playback voices."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from collections.abc import Sequence


class InvalidLiSaInit(Exception):
    """Raised on bad construction arguments or an out-of-range voice index."""


class SyncMode(IntEnum):
    """How the input signal drives playback."""

    INTERNAL = 0
    POSITION = 1
    DURATION = 2


@dataclass
class Voice:
    """State of one playback voice."""

    gains: list[float]
    loop_start: int = 0
    loop_end: int = 0
    gain: float = 1.0
    pan: float = 0.5
    rate: float = 1.0
    position: float = 0.0
    loop: bool = True
    bi: bool = False
    _play: bool = field(default=False, repr=False)
    _rampup: bool = field(default=False, repr=False)
    _rampdown: bool = field(default=False, repr=False)
    _rampup_len: float = field(default=0.0, repr=False)
    _rampdown_len: float = field(default=0.0, repr=False)
    _rampup_len_inv: float = field(default=1.0, repr=False)
    _rampdown_len_inv: float = field(default=1.0, repr=False)
    _rampctr: float = field(default=0.0, repr=False)

    @property
    def play(self) -> bool:
        """Whether the voice is playing."""
        return self._play

    @play.setter
    def play(self, value: bool) -> None:
        self._play = bool(value)
        self._rampup = False
        self._rampdown = False


class LiSa:
    """Record into a sample buffer and play it back through several voices."""

    def __init__(self, nchan: int, nvoices: int, length: float) -> None:
        if nchan < 0 or nvoices < 0 or length < 0:
            raise InvalidLiSaInit("channels, voices and length must not be negative")
        size = int(length)
        self.nchan = nchan
        self.maxvoices = nvoices
        self.duration = size
        self._max = size
        self._data = [0.0] * (size + 1)
        self.loop_end_rec = size
        self.loop_rec = True
        self.record = False
        self.feedback = 0.0
        self._rec_pos = 0
        self.sync = SyncMode.INTERNAL
        self._rec_ramplen = 0.0
        self._rec_ramplen_inv = 1.0
        self.voices = [Voice(gains=[0.0] * nchan, loop_end=size) for _ in range(nvoices)]

    @property
    def rec_pos(self) -> int:
        """Current record position, in samples."""
        return self._rec_pos

    @rec_pos.setter
    def rec_pos(self, value: float) -> None:
        self._rec_pos = int(value)

    def voice(self, index: int) -> Voice:
        """Return voice ``index``; raise InvalidLiSaInit when out of range."""
        if index < 0 or index >= self.maxvoices:
            raise InvalidLiSaInit(f"no voice {index}")
        return self.voices[index]

    # -- buffer access -----------------------------------------------------

    def _lerp(self, trunc: int, nxt: int, frac: float) -> float:
        current = self._data[trunc]
        if frac == 0:
            return current
        return current + (self._data[nxt] - current) * frac

    def _record(self, sample: float) -> None:
        if not self.record:
            return
        if self.loop_rec:
            if self._rec_pos >= self.loop_end_rec:
                self._rec_pos = self.voices[0].loop_start if self.voices else 0
        elif self._rec_pos >= self.loop_end_rec:
            self.record = False
            return
        index = self._rec_pos
        value = self.feedback * self._data[index] + sample
        if index < self._rec_ramplen:
            value *= index * self._rec_ramplen_inv
        elif index > self.loop_end_rec - self._rec_ramplen:
            value *= (self.loop_end_rec - index) * self._rec_ramplen_inv
        self._data[index] = value
        self._rec_pos += 1

    def _next_sample(self, voice: Voice) -> float:
        if voice.loop:
            if voice.bi and (
                voice.position >= voice.loop_end or voice.position < voice.loop_start
            ):
                voice.position -= voice.rate
                voice.rate = -voice.rate
            span = voice.loop_end - voice.loop_start
            if span == 0:
                voice.position = float(voice.loop_start)
            elif span > 0:
                if voice.position >= voice.loop_end:
                    voice.position = voice.loop_start + (voice.position - voice.loop_end) % span
                if voice.position < voice.loop_start:
                    voice.position = voice.loop_start + (voice.position - voice.loop_start) % span
        elif voice.position >= self.duration or voice.position < 0:
            voice._play = False
            return 0.0

        trunc = int(voice.position)
        frac = voice.position - trunc
        nxt = trunc + 1
        if voice.loop:
            if nxt >= voice.loop_end:
                nxt = voice.loop_start
            if trunc >= voice.loop_end:
                trunc = voice.loop_start
        else:
            if trunc >= self.duration:
                trunc = self.duration - 1
                nxt = 0
            if nxt >= self.duration:
                nxt = 0
        voice.position += voice.rate
        out = self._lerp(trunc, nxt, frac)

        if voice._rampup:
            out *= voice._rampctr * voice._rampup_len_inv
            voice._rampctr += 1
            if voice._rampctr >= voice._rampup_len:
                voice._rampup = False
        elif voice._rampdown:
            out *= (voice._rampdown_len - voice._rampctr) * voice._rampdown_len_inv
            voice._rampctr += 1
            if voice._rampctr >= voice._rampdown_len:
                voice._rampdown = False
                voice._play = False
        return out * voice.gain

    def _sample_at(self, voice: Voice, where: float) -> float:
        if where > voice.loop_end:
            where = voice.loop_end
        elif where < voice.loop_start:
            where = voice.loop_start
        trunc = int(where)
        frac = where - trunc
        nxt = trunc + 1
        if nxt == voice.loop_end:
            nxt = voice.loop_start
        return self._lerp(trunc, nxt, frac) * voice.gain

    def _process(self, sample: float) -> list[float]:
        outs = [0.0] * self.nchan
        self._record(sample)
        if self.sync == SyncMode.INTERNAL:
            for voice in self.voices:
                if voice.play:
                    value = self._next_sample(voice)
                    for j in range(self.nchan):
                        outs[j] += value * voice.gains[j]
        elif self.sync == SyncMode.POSITION:
            amount = abs(sample)
            for voice in self.voices:
                if voice.play:
                    location = voice.loop_start + amount * (voice.loop_end - voice.loop_start)
                    value = self._sample_at(voice, location)
                    for j in range(self.nchan):
                        outs[j] += value * voice.gains[j]
        elif self.sync == SyncMode.DURATION and self.voices and self.voices[0].play:
            first = self.voices[0]
            value = self._sample_at(first, abs(sample))
            for j in range(self.nchan):
                outs[j] += value * first.gains[j]
        return outs

    # -- ticking -----------------------------------------------------------

    def tick(self, sample: float) -> float:
        """Process one input sample and return the first channel's output."""
        outs = self._process(sample)
        return outs[0] if outs else 0.0

    def tick_multi(self, samples: Sequence[float]) -> list[float]:
        """Process one frame: channel ``i`` output comes from a pass fed with input ``i``."""
        samples = list(samples)
        if len(samples) != self.nchan:
            raise ValueError(f"expected {self.nchan} samples, got {len(samples)}")
        return [self._process(value)[i] for i, value in enumerate(samples)]

    # -- controls ----------------------------------------------------------

    def set_pan(self, voice: int, pan: float) -> float:
        """Place a voice between output channels and recompute its gains."""
        chan = self.voice(voice)
        chan.pan = pan
        gains = chan.gains
        for i in range(self.nchan):
            gains[i] = 0.0
        pan_trunc = int(pan) if pan >= 0 else -1
        for i in range(self.nchan):
            if i != pan_trunc:
                continue
            gains[i] = 1.0 - (pan - i)
            if self.nchan > 1:
                other = 0 if i == self.nchan - 1 else i + 1
                gains[other] = math.sqrt(max(1.0 - gains[i], 0.0))
            gains[i] = math.sqrt(max(gains[i], 0.0))
        return pan

    def ramp_up(self, voice: int, length: float) -> float:
        """Start a voice with a fade-in of ``length`` samples."""
        chan = self.voice(voice)
        chan._rampup = True
        chan._play = True
        chan._rampup_len = length
        if chan._rampup_len > 0.0:
            chan._rampup_len_inv = 1.0 / chan._rampup_len
        else:
            chan._rampup_len = 1.0
        if chan._rampdown:
            chan._rampctr = chan._rampup_len * (1.0 - chan._rampctr / chan._rampdown_len)
            chan._rampdown = False
        else:
            chan._rampctr = 0.0
        return length

    def ramp_down(self, voice: int, length: float) -> float:
        """Fade a voice out over ``length`` samples, then stop it."""
        chan = self.voice(voice)
        chan._rampdown = True
        chan._rampdown_len = length
        if chan._rampdown_len > 0.0:
            chan._rampdown_len_inv = 1.0 / chan._rampdown_len
        else:
            chan._rampdown_len = 1.0
        if chan._rampup:
            chan._rampctr = chan._rampdown_len * (1.0 - chan._rampctr / chan._rampup_len)
            chan._rampup = False
        else:
            chan._rampctr = 0.0
        return length

    def set_rec_ramp(self, length: float) -> float:
        """Set the fade length applied at both ends of the record loop."""
        self._rec_ramplen = float(length)
        self._rec_ramplen_inv = 1.0 / self._rec_ramplen if self._rec_ramplen > 0.0 else 1.0
        return length

    def set_loop_start(self, voice: int, position: float) -> float:
        """Set a voice's loop start, kept inside the buffer."""
        chan = self.voice(voice)
        start = int(position)
        if start < 0:
            start = 0
        elif start >= self.duration:
            start = max(self.duration - 1, 0)
        chan.loop_start = start
        return float(start)

    def set_loop_end(self, voice: int, position: float) -> float:
        """Set a voice's loop end, capped at the last buffer sample."""
        chan = self.voice(voice)
        end = int(position)
        if end < 0 or end >= self.duration:
            end = max(self.duration - 1, 0)
        chan.loop_end = end
        return float(end)

    def clamp_duration(self, length: float) -> float:
        """Return ``length`` limited to the allocated buffer size."""
        return float(self._max) if length > self._max else length

    def clear(self) -> None:
        """Zero the sample buffer."""
        for i in range(self.duration):
            self._data[i] = 0.0

    def free_voice(self) -> int:
        """Index of the first voice not playing, or -1 if all are busy."""
        return next((i for i, voice in enumerate(self.voices) if not voice.play), -1)

    def value_at(self, index: float) -> float:
        """Read the buffer at a fractional position, interpolating linearly."""
        if index > self.duration:
            index = self.duration
        elif index < 0:
            index = 0
        trunc = int(index)
        frac = index - trunc
        nxt = trunc + 1
        if nxt == self.duration:
            nxt = 0
        return self._lerp(trunc, nxt, frac)

    def set_value_at(self, index: float, value: float) -> float:
        """Write one sample into the buffer, clamping the index."""
        position = int(index)
        if position < 0:
            position = 0
        elif position >= self.duration:
            position = self.duration
        self._data[position] = value
        return value