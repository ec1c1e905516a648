"""Effect configuration: defaults, validation and dict round trip."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any

from wavfx._helpers import _feedback_gain

EFFECTS: tuple[str, ...] = ("echo", "reverb", "chorus")

DEFAULT_EFFECT = "echo"
DEFAULT_WET = 0.5
DEFAULT_DELAY_MS = 250.0
DEFAULT_DECAY_TIME_S = 1.0
DEFAULT_CHORUS_RATE_HZ = 0.8
DEFAULT_CHORUS_DEPTH_MS = 20.0
DEFAULT_DAMPING = 0.5


class EffectConfigError(ValueError):
    """Raised when an effect configuration is out of range."""


@dataclass(frozen=True)
class EffectConfig:
    """Parameters for one effect pass.

    ``decay_time_s`` and ``damping`` apply to echo/reverb (``damping`` to
    reverb only); ``chorus_rate_hz`` and ``chorus_depth_ms`` to chorus only.
    ``delay_ms`` is the echo spacing or the chorus base delay.
    """

    effect: str = DEFAULT_EFFECT
    wet: float = DEFAULT_WET
    delay_ms: float = DEFAULT_DELAY_MS
    decay_time_s: float = DEFAULT_DECAY_TIME_S
    chorus_rate_hz: float = DEFAULT_CHORUS_RATE_HZ
    chorus_depth_ms: float = DEFAULT_CHORUS_DEPTH_MS
    damping: float = DEFAULT_DAMPING

    def __post_init__(self):
        # Normalise the effect name so "Reverb" and "reverb" compare equal.
        if isinstance(self.effect, str):
            object.__setattr__(self, "effect", self.effect.strip().lower())

    def validate(self) -> EffectConfig:
        """Check every range; return self so calls can be chained."""
        if self.effect not in EFFECTS:
            raise EffectConfigError(
                f"Unknown effect {self.effect!r}, valid names: {list(EFFECTS)}"
            )

        for name in (
            "wet",
            "delay_ms",
            "decay_time_s",
            "chorus_rate_hz",
            "chorus_depth_ms",
            "damping",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise EffectConfigError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise EffectConfigError(f"{name} must be finite, got {value}")

        if not 0.0 <= self.wet <= 1.0:
            raise EffectConfigError(f"wet must be in [0, 1], got {self.wet}")
        if self.delay_ms <= 0:
            raise EffectConfigError(f"delay_ms must be > 0, got {self.delay_ms}")

        if self.effect in ("echo", "reverb"):
            if self.decay_time_s <= 0:
                raise EffectConfigError(
                    f"decay_time_s must be > 0, got {self.decay_time_s}"
                )
            gain = 10.0 ** (-3.0 * (self.delay_ms / 1000.0) / self.decay_time_s)
            if gain >= 1.0:
                raise EffectConfigError(
                    f"delay_ms={self.delay_ms} is too short for "
                    f"decay_time_s={self.decay_time_s} (feedback gain would be 1.0)"
                )
        if self.effect == "reverb" and not 0.0 <= self.damping < 1.0:
            raise EffectConfigError(f"damping must be in [0, 1), got {self.damping}")
        if self.effect == "chorus":
            if self.chorus_rate_hz <= 0:
                raise EffectConfigError(
                    f"chorus_rate_hz must be > 0, got {self.chorus_rate_hz}"
                )
            if self.chorus_depth_ms < 0:
                raise EffectConfigError(
                    f"chorus_depth_ms must be >= 0, got {self.chorus_depth_ms}"
                )
        return self

    @property
    def delay_s(self) -> float:
        return self.delay_ms / 1000.0

    @property
    def feedback_gain(self) -> float:
        """RT60-derived feedback gain for echo/reverb."""
        return _feedback_gain(self.delay_s, self.decay_time_s)

    def replace(self, **overrides: Any) -> EffectConfig:
        try:
            return dataclasses.replace(self, **overrides)
        except TypeError as e:
            raise EffectConfigError(str(e)) from None

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EffectConfig:
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise EffectConfigError(
                f"Unknown config keys {unknown}, valid keys: {sorted(known)}"
            )
        return cls(**data)
