"""SampleBuffer -- mono, metadata-carrying wrapper around a float32 numpy array.

The batch tool only handles mono 16-bit recordings, so a buffer is a single
row of normalized samples plus the sample rate it was recorded at.
"""

from __future__ import annotations

import numpy as np

from wavfx._helpers import _float_to_pcm16, _pcm16_to_float


class SampleBuffer:
    """A 1D float32 buffer of normalized samples with metadata.

    Parameters
    ----------
    data : array-like or SampleBuffer
        Audio samples.  A ``[1, N]`` array is flattened to ``[N]``.
    sample_rate : float
        Sample rate in Hz.
    label : str or None
        Free-form label carried as metadata (the batch driver stores the
        source path here).
    """

    __slots__ = ("_data", "_sample_rate", "_label")

    def __init__(
        self,
        data,
        sample_rate: float = 16000.0,
        label: str | None = None,
    ):
        if isinstance(data, SampleBuffer):
            arr = data._data.copy()
        else:
            arr = np.asarray(data, dtype=np.float32)

        if arr.ndim == 2 and arr.shape[0] == 1:
            arr = arr.reshape(-1)
        elif arr.ndim != 1:
            raise ValueError(
                f"SampleBuffer holds mono audio, got array of shape {arr.shape}"
            )

        if arr.dtype != np.float32:
            arr = arr.astype(np.float32)
        if not arr.flags["C_CONTIGUOUS"]:
            arr = np.ascontiguousarray(arr)

        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self._data: np.ndarray = arr
        self._sample_rate: float = float(sample_rate)
        self._label: str | None = label

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def samples(self) -> np.ndarray:
        """Raw 1D float32 array."""
        return self._data

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def frames(self) -> int:
        return self._data.shape[0]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self._data.shape[0] / self._sample_rate

    @property
    def label(self) -> str | None:
        return self._label

    @property
    def peak(self) -> float:
        """Largest absolute sample value (0.0 for an empty buffer)."""
        if self.frames == 0:
            return 0.0
        return float(np.max(np.abs(self._data)))

    @property
    def rms(self) -> float:
        if self.frames == 0:
            return 0.0
        return float(np.sqrt(np.mean(self._data.astype(np.float64) ** 2)))

    # ------------------------------------------------------------------
    # Numpy interop
    # ------------------------------------------------------------------

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data
        return self._data.astype(dtype)

    def __len__(self) -> int:
        return self.frames

    def __repr__(self) -> str:
        parts = [f"frames={self.frames}", f"sr={self.sample_rate}"]
        if self._label is not None:
            parts.append(f"label='{self._label}'")
        return f"SampleBuffer({', '.join(parts)})"

    # ------------------------------------------------------------------
    # PCM conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_pcm16(
        cls,
        ints,
        sample_rate: float = 16000.0,
        label: str | None = None,
    ) -> SampleBuffer:
        """Build a buffer from signed 16-bit PCM (``sample / 32768``)."""
        return cls(_pcm16_to_float(ints), sample_rate=sample_rate, label=label)

    def to_pcm16(self) -> np.ndarray:
        """Quantize to int16 (``round(clamp(sample) * 32767)``)."""
        return _float_to_pcm16(self._data)

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, frames: int, sample_rate: float = 16000.0, **kw) -> SampleBuffer:
        return cls(np.zeros(frames, dtype=np.float32), sample_rate=sample_rate, **kw)

    @classmethod
    def impulse(
        cls,
        frames: int = 1024,
        sample_rate: float = 16000.0,
        position: int = 0,
        **kw,
    ) -> SampleBuffer:
        """Unit impulse at *position*."""
        arr = np.zeros(frames, dtype=np.float32)
        arr[position] = 1.0
        return cls(arr, sample_rate=sample_rate, **kw)

    @classmethod
    def sine(
        cls,
        freq: float,
        frames: int = 4096,
        sample_rate: float = 16000.0,
        amplitude: float = 1.0,
        **kw,
    ) -> SampleBuffer:
        t = np.arange(frames, dtype=np.float64) / sample_rate
        row = (amplitude * np.sin(2.0 * np.pi * freq * t)).astype(np.float32)
        return cls(row, sample_rate=sample_rate, **kw)

    @classmethod
    def noise(
        cls,
        frames: int = 4096,
        sample_rate: float = 16000.0,
        seed: int | None = None,
        amplitude: float = 0.25,
        **kw,
    ) -> SampleBuffer:
        rng = np.random.default_rng(seed)
        arr = (amplitude * rng.standard_normal(frames)).astype(np.float32)
        return cls(arr, sample_rate=sample_rate, **kw)

    # ------------------------------------------------------------------
    # Derived buffers
    # ------------------------------------------------------------------

    def with_samples(self, samples) -> SampleBuffer:
        """New buffer with *samples* and this buffer's metadata."""
        return SampleBuffer(samples, sample_rate=self._sample_rate, label=self._label)

    def gain_db(self, db: float) -> SampleBuffer:
        """Return a new buffer scaled by ``10**(db/20)``."""
        factor = np.float32(10.0 ** (db / 20.0))
        return self.with_samples(self._data * factor)

    def copy(self) -> SampleBuffer:
        """Deep copy with independent numpy storage."""
        return SampleBuffer(
            self._data.copy(),
            sample_rate=self._sample_rate,
            label=self._label,
        )
