"""Fixed-capacity circular delay line."""

from __future__ import annotations

import math

import numpy as np


class DelayLine:
    """Circular buffer of samples with integer and fractional taps.

    ``read(0)`` returns the most recent write, ``read(d)`` the sample written
    *d* writes before that.  History older than the first write is silence.

    Example usage::

        line = DelayLine(delay_samples)
        for x in samples:
            delayed = line.read(delay_samples - 1)
            line.write(x + delayed * feedback)

    Parameters
    ----------
    capacity : int
        Number of samples the line remembers.
    """

    __slots__ = ("_buf", "_cursor", "_capacity")

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = int(capacity)
        self._buf = np.zeros(self._capacity, dtype=np.float64)
        self._cursor = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        """Slot the next write goes to."""
        return self._cursor

    def write(self, sample: float) -> None:
        self._buf[self._cursor] = sample
        self._cursor = (self._cursor + 1) % self._capacity

    def read(self, offset: int) -> float:
        assert 0 <= offset < self._capacity, (
            f"offset {offset} outside [0, {self._capacity - 1}]"
        )
        offset = min(max(int(offset), 0), self._capacity - 1)
        return float(self._buf[(self._cursor - 1 - offset) % self._capacity])

    def read_fractional(self, offset: float) -> float:
        """Linearly interpolated read between ``floor(offset)`` and the next tap.

        *offset* must lie in ``[0, capacity - 2]`` so that the older tap is
        still inside the remembered history.
        """
        assert 0.0 <= offset <= self._capacity - 2, (
            f"fractional offset {offset} outside [0, {self._capacity - 2}]"
        )
        offset = min(max(offset, 0.0), float(self._capacity - 1))
        whole = math.floor(offset)
        frac = offset - whole
        newer = self.read(whole)
        if frac == 0.0:
            return newer
        older = self.read(whole + 1)
        return newer + (older - newer) * frac

    def reset(self) -> None:
        """Back to silence without reallocating."""
        self._buf.fill(0.0)
        self._cursor = 0
