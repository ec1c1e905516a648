"""Delay-based effects: echo, reverb and chorus.

Each effect is its own engine class holding exactly the state it needs:

- ``EchoEngine``   -- delay line with feedback
- ``ReverbEngine`` -- delay line with feedback through a one-pole low-pass
- ``ChorusEngine`` -- LFO-modulated feed-forward delay line

Engines work on plain numpy arrays and always return as many samples as
they are given; the decaying tail past the end of the input is dropped.
``apply`` is the buffer-level entry point used by the batch driver.
"""

from __future__ import annotations

import math

import numpy as np

from wavfx.buffer import SampleBuffer
from wavfx.config import EffectConfig
from wavfx.delay import DelayLine
from wavfx.envelopes import LFO
from wavfx.filters import OnePoleFilter
from wavfx.mix import mix
from wavfx._helpers import (
    _feedback_gain,
    _ms_to_fractional_samples,
    _ms_to_samples,
)


def _as_float64(samples) -> np.ndarray:
    return np.asarray(samples, dtype=np.float64).reshape(-1)


# ---------------------------------------------------------------------------
# Echo
# ---------------------------------------------------------------------------


class EchoEngine:
    """Feedback delay: ``line <- x[i] + g * line[i - D]``, wet tap ``line[i - D]``.

    An impulse comes back at ``D, 2D, 3D, ...`` with amplitudes
    ``1, g, g**2, ...``.
    """

    __slots__ = ("delay_samples", "gain", "wet", "_line")

    def __init__(self, delay_samples: int, gain: float, wet: float):
        assert 0.0 <= gain < 1.0, f"unstable feedback gain {gain}"
        self.delay_samples = int(delay_samples)
        self.gain = float(gain)
        self.wet = float(wet)
        self._line = DelayLine(self.delay_samples)

    def render_wet(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        out = np.empty_like(x)
        line = self._line
        line.reset()
        tap = self.delay_samples - 1
        g = self.gain
        for i, inp in enumerate(x.tolist()):
            delayed = line.read(tap)
            out[i] = delayed
            line.write(inp + delayed * g)
        return out

    def process(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        return mix(x, self.render_wet(x), self.wet)


# ---------------------------------------------------------------------------
# Reverb
# ---------------------------------------------------------------------------


class ReverbEngine:
    """Echo whose feedback path is low-passed on every pass.

    The wet tap is the undamped delayed sample, so the first reflection is
    unfiltered and only the recirculating tail darkens.
    """

    __slots__ = ("delay_samples", "gain", "wet", "_line", "_filter")

    def __init__(self, delay_samples: int, gain: float, wet: float, damping: float):
        assert 0.0 <= gain < 1.0, f"unstable feedback gain {gain}"
        self.delay_samples = int(delay_samples)
        self.gain = float(gain)
        self.wet = float(wet)
        self._line = DelayLine(self.delay_samples)
        self._filter = OnePoleFilter.from_damping(damping)

    @property
    def damping_coefficient(self) -> float:
        return self._filter.coefficient

    def render_wet(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        out = np.empty_like(x)
        line = self._line
        lp = self._filter
        line.reset()
        lp.reset()
        tap = self.delay_samples - 1
        g = self.gain
        for i, inp in enumerate(x.tolist()):
            delayed = line.read(tap)
            out[i] = delayed
            line.write(inp + lp.process(delayed) * g)
        return out

    def process(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        return mix(x, self.render_wet(x), self.wet)


# ---------------------------------------------------------------------------
# Chorus
# ---------------------------------------------------------------------------


class ChorusEngine:
    """Feed-forward delay whose length sweeps with a unipolar sine LFO.

    Read offsets stay in ``[base_delay_samples, base_delay_samples +
    depth_samples]``; the line keeps two extra samples so the interpolated
    read never reaches past the remembered history.
    """

    __slots__ = ("base_delay_samples", "depth_samples", "wet", "_lfo", "_line")

    def __init__(
        self,
        base_delay_samples: float,
        depth_samples: float,
        rate_hz: float,
        sample_rate: float,
        wet: float,
    ):
        self.base_delay_samples = float(base_delay_samples)
        self.depth_samples = float(depth_samples)
        self.wet = float(wet)
        self._lfo = LFO(
            rate_hz=float(rate_hz),
            depth_samples=self.depth_samples,
            sample_rate=float(sample_rate),
        )
        capacity = math.ceil(self.base_delay_samples + self.depth_samples) + 2
        self._line = DelayLine(capacity)

    @property
    def capacity(self) -> int:
        return self._line.capacity

    @property
    def lfo(self) -> LFO:
        return self._lfo

    def read_offsets(self, n: int) -> np.ndarray:
        """Fractional read offsets for sample indices ``0..n-1``."""
        return self.base_delay_samples + self._lfo.offset_at(np.arange(n))

    def render_wet(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        out = np.empty_like(x)
        line = self._line
        line.reset()
        offsets = self.read_offsets(x.shape[0]).tolist()
        for i, inp in enumerate(x.tolist()):
            line.write(inp)
            out[i] = line.read_fractional(offsets[i])
        return out

    def process(self, samples) -> np.ndarray:
        x = _as_float64(samples)
        return mix(x, self.render_wet(x), self.wet)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _build_echo(config: EffectConfig, sample_rate: float) -> EchoEngine:
    return EchoEngine(
        _ms_to_samples(config.delay_ms, sample_rate),
        _feedback_gain(config.delay_s, config.decay_time_s),
        config.wet,
    )


def _build_reverb(config: EffectConfig, sample_rate: float) -> ReverbEngine:
    return ReverbEngine(
        _ms_to_samples(config.delay_ms, sample_rate),
        _feedback_gain(config.delay_s, config.decay_time_s),
        config.wet,
        config.damping,
    )


def _build_chorus(config: EffectConfig, sample_rate: float) -> ChorusEngine:
    return ChorusEngine(
        _ms_to_fractional_samples(config.delay_ms, sample_rate),
        _ms_to_fractional_samples(config.chorus_depth_ms, sample_rate),
        config.chorus_rate_hz,
        sample_rate,
        config.wet,
    )


_ENGINE_BUILDERS = {
    "echo": _build_echo,
    "reverb": _build_reverb,
    "chorus": _build_chorus,
}


def build_engine(config: EffectConfig, sample_rate: float):
    """Construct the engine for ``config.effect``.

    *config* must already be validated.
    """
    builder = _ENGINE_BUILDERS.get(config.effect)
    if builder is None:
        raise ValueError(
            f"Unknown effect {config.effect!r}, valid names: {sorted(_ENGINE_BUILDERS)}"
        )
    return builder(config, sample_rate)


def apply(buf: SampleBuffer, config: EffectConfig) -> SampleBuffer:
    """Validate *config*, run its effect over *buf* and return a new buffer."""
    config.validate()
    engine = build_engine(config, buf.sample_rate)
    return buf.with_samples(engine.process(buf.samples))


# ---------------------------------------------------------------------------
# Buffer-level effect functions
# ---------------------------------------------------------------------------


def echo(
    buf: SampleBuffer,
    wet: float = 0.5,
    delay_ms: float = 250.0,
    decay_time_s: float = 1.0,
) -> SampleBuffer:
    """Apply a feedback echo."""
    config = EffectConfig(
        effect="echo", wet=wet, delay_ms=delay_ms, decay_time_s=decay_time_s
    )
    return apply(buf, config)


def reverb(
    buf: SampleBuffer,
    wet: float = 0.5,
    delay_ms: float = 250.0,
    decay_time_s: float = 1.0,
    damping: float = 0.5,
) -> SampleBuffer:
    """Apply a damped feedback delay (single-line reverb)."""
    config = EffectConfig(
        effect="reverb",
        wet=wet,
        delay_ms=delay_ms,
        decay_time_s=decay_time_s,
        damping=damping,
    )
    return apply(buf, config)


def chorus(
    buf: SampleBuffer,
    wet: float = 0.5,
    delay_ms: float = 250.0,
    rate_hz: float = 0.8,
    depth_ms: float = 20.0,
) -> SampleBuffer:
    """Apply a modulated-delay chorus."""
    config = EffectConfig(
        effect="chorus",
        wet=wet,
        delay_ms=delay_ms,
        chorus_rate_hz=rate_hz,
        chorus_depth_ms=depth_ms,
    )
    return apply(buf, config)
