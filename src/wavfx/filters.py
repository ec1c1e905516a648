"""One-pole low-pass filter used in the reverb feedback path."""

from __future__ import annotations


class OnePoleFilter:
    """``y[n] = c * x[n] + (1 - c) * y[n-1]``.

    A coefficient in ``(0, 1]`` keeps the output bounded by the input; ``c=1``
    passes the signal through unchanged.
    """

    __slots__ = ("_coefficient", "_state")

    def __init__(self, coefficient: float):
        if not 0.0 < coefficient <= 1.0:
            raise ValueError(f"coefficient must be in (0, 1], got {coefficient}")
        self._coefficient = float(coefficient)
        self._state = 0.0

    @classmethod
    def from_damping(cls, damping: float) -> OnePoleFilter:
        """Filter whose high-frequency loss per pass grows with *damping* in [0, 1)."""
        if not 0.0 <= damping < 1.0:
            raise ValueError(f"damping must be in [0, 1), got {damping}")
        return cls(1.0 - damping)

    @property
    def coefficient(self) -> float:
        return self._coefficient

    @property
    def state(self) -> float:
        return self._state

    def process(self, x: float) -> float:
        y = self._coefficient * x + (1.0 - self._coefficient) * self._state
        self._state = y
        return y

    def reset(self) -> None:
        self._state = 0.0
