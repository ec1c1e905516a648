"""WAV file I/O for SampleBuffer.

Only mono 16-bit signed PCM is accepted (stdlib ``wave``).  The sample rate
is checked against a required rate, 16 kHz unless told otherwise.
"""

from __future__ import annotations

import wave
from pathlib import Path
from typing import Any

import numpy as np

from wavfx.buffer import SampleBuffer

REQUIRED_SAMPLE_RATE = 16000


class WavFormatError(ValueError):
    """Raised for WAV files the effects engine cannot take."""


def wav_info(path: str | Path) -> dict[str, Any]:
    """Return header metadata without checking the format constraints."""
    path = Path(path)
    try:
        with wave.open(str(path), "rb") as wf:
            n_channels = wf.getnchannels()
            sampwidth = wf.getsampwidth()
            sample_rate = wf.getframerate()
            n_frames = wf.getnframes()
    except (wave.Error, EOFError) as e:
        raise WavFormatError(f"{path}: not a readable WAV file ({e})") from e
    return {
        "channels": n_channels,
        "bits_per_sample": sampwidth * 8,
        "sample_rate": sample_rate,
        "frames": n_frames,
        "duration": n_frames / sample_rate if sample_rate else 0.0,
    }


def read_wav(
    path: str | Path,
    sample_rate: int | None = REQUIRED_SAMPLE_RATE,
) -> SampleBuffer:
    """Read a mono 16-bit PCM WAV file and return a SampleBuffer.

    Parameters
    ----------
    path : str or Path
        Input file path.
    sample_rate : int or None
        Required sample rate in Hz; ``None`` accepts any rate.

    Raises
    ------
    WavFormatError
        The file is malformed, not mono, not 16-bit, or at the wrong rate.
    """
    path = Path(path)
    try:
        with wave.open(str(path), "rb") as wf:
            n_channels = wf.getnchannels()
            sampwidth = wf.getsampwidth()
            file_rate = wf.getframerate()
            n_frames = wf.getnframes()
            raw_bytes = wf.readframes(n_frames)
    except (wave.Error, EOFError) as e:
        raise WavFormatError(f"{path}: not a readable WAV file ({e})") from e

    if n_channels != 1:
        raise WavFormatError(f"{path}: only mono audio supported, got {n_channels} channels")
    if sampwidth != 2:
        raise WavFormatError(
            f"{path}: only 16-bit PCM supported, got {sampwidth * 8}-bit"
        )
    if sample_rate is not None and file_rate != sample_rate:
        raise WavFormatError(
            f"{path}: only {sample_rate} Hz supported, got {file_rate} Hz"
        )

    if len(raw_bytes) % 2:
        raw_bytes = raw_bytes[:-1]
    ints = np.frombuffer(raw_bytes, dtype="<i2")
    return SampleBuffer.from_pcm16(ints, sample_rate=float(file_rate), label=str(path))


def write_wav(path: str | Path, buf: SampleBuffer) -> None:
    """Write *buf* as mono 16-bit PCM at its own sample rate."""
    path = Path(path)
    raw_bytes = buf.to_pcm16().astype("<i2").tobytes()
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(int(round(buf.sample_rate)))
        wf.writeframes(raw_bytes)
