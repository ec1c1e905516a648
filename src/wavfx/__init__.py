"""
wavfx - delay-based effects for mono 16-bit WAV recordings.

Submodules:
    wavfx.buffer    - SampleBuffer (normalized mono samples + PCM16 conversion)
    wavfx.delay     - Circular delay line with fractional reads
    wavfx.filters   - One-pole low-pass filter
    wavfx.envelopes - Stateless unipolar sine LFO
    wavfx.mix       - Wet/dry mixing
    wavfx.effects   - Echo, reverb and chorus engines
    wavfx.config    - EffectConfig defaults and validation
    wavfx.io        - WAV file I/O
    wavfx.batch     - Recursive directory processing
"""

__version__ = "0.1.0"

from wavfx.buffer import SampleBuffer
from wavfx.config import EffectConfig, EffectConfigError
from wavfx import batch, config, delay, effects, envelopes, filters, io, mix

__all__ = [
    "SampleBuffer",
    "EffectConfig",
    "EffectConfigError",
    "batch",
    "config",
    "delay",
    "effects",
    "envelopes",
    "filters",
    "io",
    "mix",
]
