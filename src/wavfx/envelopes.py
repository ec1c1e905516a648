"""Low-frequency oscillators for delay-time modulation."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class LFO:
    """Unipolar sine LFO returning a delay offset in samples.

    ``offset_at(i) = depth_samples * (0.5 + 0.5 * sin(2*pi*rate_hz*i/sample_rate))``

    The result always lies in ``[0, depth_samples]``.  There is no phase
    accumulator: any index can be evaluated independently, and *i* may be a
    numpy array of indices.
    """

    rate_hz: float
    depth_samples: float
    sample_rate: float

    def offset_at(self, index):
        phase = 2.0 * np.pi * self.rate_hz * np.asarray(index, dtype=np.float64)
        value = self.depth_samples * (0.5 + 0.5 * np.sin(phase / self.sample_rate))
        if np.ndim(value) == 0:
            return float(value)
        return value
