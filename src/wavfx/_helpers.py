"""Shared private numeric helpers for wavfx modules."""

from __future__ import annotations

import math

import numpy as np


# ---------------------------------------------------------------------------
# PCM scaling
# ---------------------------------------------------------------------------

# int16 -> float divides by 32768 so that -32768 maps exactly to -1.0;
# float -> int16 multiplies by 32767 so that +1.0 never overflows.
PCM16_DECODE_SCALE = 32768.0
PCM16_ENCODE_SCALE = 32767.0


def _pcm16_to_float(ints: np.ndarray) -> np.ndarray:
    """Convert int16 PCM samples to normalized float32."""
    return (np.asarray(ints, dtype=np.int16).astype(np.float32)) / PCM16_DECODE_SCALE


def _float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1] and quantize to int16 without wraparound."""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    return np.round(clipped * PCM16_ENCODE_SCALE).astype(np.int16)


# ---------------------------------------------------------------------------
# Time / sample conversion
# ---------------------------------------------------------------------------


def _ms_to_samples(ms: float, sample_rate: float) -> int:
    """Whole-sample delay for *ms* milliseconds, never less than one sample."""
    return max(1, int(round(ms / 1000.0 * sample_rate)))


def _ms_to_fractional_samples(ms: float, sample_rate: float) -> float:
    return ms / 1000.0 * sample_rate


# ---------------------------------------------------------------------------
# Feedback gain
# ---------------------------------------------------------------------------


def _feedback_gain(delay_s: float, decay_time_s: float) -> float:
    """Per-pass feedback gain for an RT60-style decay.

    After *decay_time_s* seconds the recirculating signal has dropped by
    60 dB, i.e. ``g ** (decay_time_s / delay_s) == 10 ** -3``.
    """
    gain = 10.0 ** (-3.0 * delay_s / decay_time_s)
    assert 0.0 <= gain < 1.0, f"unstable feedback gain {gain}"
    return gain


# ---------------------------------------------------------------------------
# Level helpers
# ---------------------------------------------------------------------------


def _amplitude_to_db(value: float) -> float:
    """Amplitude to dBFS, ``-inf`` for silence."""
    if value <= 0.0:
        return float("-inf")
    return 20.0 * math.log10(value)
