"""Preset registry, override parsing, and type coercion for the CLI."""

from __future__ import annotations

import dataclasses
from typing import Any

from wavfx.config import EffectConfig, EffectConfigError


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

PRESETS: dict[str, dict[str, Any]] = {
    # --- Echo ---
    "slapback": {
        "category": "echo",
        "description": "Single short slap (80 ms, fast decay)",
        "config": {"effect": "echo", "wet": 0.35, "delay_ms": 80.0, "decay_time_s": 0.2},
    },
    "quarter_echo": {
        "category": "echo",
        "description": "Rhythmic echo (250 ms, 1.5 s decay)",
        "config": {"effect": "echo", "wet": 0.4, "delay_ms": 250.0, "decay_time_s": 1.5},
    },
    "long_echo": {
        "category": "echo",
        "description": "Canyon echo (500 ms, 4 s decay)",
        "config": {"effect": "echo", "wet": 0.4, "delay_ms": 500.0, "decay_time_s": 4.0},
    },
    # --- Reverb ---
    "room": {
        "category": "reverb",
        "description": "Small room (30 ms, short damped tail)",
        "config": {
            "effect": "reverb",
            "wet": 0.3,
            "delay_ms": 30.0,
            "decay_time_s": 0.6,
            "damping": 0.4,
        },
    },
    "hall": {
        "category": "reverb",
        "description": "Hall (60 ms, 1.8 s tail)",
        "config": {
            "effect": "reverb",
            "wet": 0.35,
            "delay_ms": 60.0,
            "decay_time_s": 1.8,
            "damping": 0.5,
        },
    },
    "dark_hall": {
        "category": "reverb",
        "description": "Heavily damped hall (70 ms, 2.5 s tail)",
        "config": {
            "effect": "reverb",
            "wet": 0.4,
            "delay_ms": 70.0,
            "decay_time_s": 2.5,
            "damping": 0.8,
        },
    },
    # --- Chorus ---
    "doubler": {
        "category": "chorus",
        "description": "Voice doubler (20 ms base, shallow slow sweep)",
        "config": {
            "effect": "chorus",
            "wet": 0.5,
            "delay_ms": 20.0,
            "chorus_rate_hz": 0.5,
            "chorus_depth_ms": 3.0,
        },
    },
    "wide_chorus": {
        "category": "chorus",
        "description": "Lush chorus (25 ms base, deep sweep)",
        "config": {
            "effect": "chorus",
            "wet": 0.5,
            "delay_ms": 25.0,
            "chorus_rate_hz": 0.8,
            "chorus_depth_ms": 10.0,
        },
    },
    "vibrato": {
        "category": "chorus",
        "description": "Pitch wobble (fully wet, fast sweep)",
        "config": {
            "effect": "chorus",
            "wet": 1.0,
            "delay_ms": 5.0,
            "chorus_rate_hz": 5.0,
            "chorus_depth_ms": 2.0,
        },
    },
}


def get_preset_categories() -> dict[str, list[str]]:
    """Return presets grouped by category."""
    cats: dict[str, list[str]] = {}
    for name, info in PRESETS.items():
        cat = info.get("category", "other")
        cats.setdefault(cat, []).append(name)
    return cats


def preset_config(name: str, base: EffectConfig | None = None) -> EffectConfig:
    """Return *base* (defaults when None) with the preset's settings applied."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: {name!r}")
    base = base or EffectConfig()
    return base.replace(**PRESETS[name]["config"])


# ---------------------------------------------------------------------------
# Override parsing
# ---------------------------------------------------------------------------


def parse_override(token: str) -> tuple[str, str]:
    """Split a ``key=value`` token; dashes in the key become underscores."""
    if "=" not in token:
        raise ValueError(f"Invalid override (expected key=value): {token!r}")
    k, v = token.split("=", 1)
    return k.strip().replace("-", "_"), v.strip()


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------


def coerce_value(value: str, target_type: type | None) -> Any:
    """Coerce a string value to the target type.

    If target_type is None, tries int -> float -> str.
    """
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    if target_type is str:
        return value
    try:
        f = float(value)
        if f.is_integer() and "." not in value and "e" not in value.lower():
            return int(value)
        return f
    except ValueError:
        return value


def coerce_overrides(raw: dict[str, str]) -> dict[str, Any]:
    """Coerce raw string overrides to EffectConfig field types.

    Field types are taken from the dataclass defaults.  Unknown keys raise
    EffectConfigError.
    """
    defaults = {f.name: f.default for f in dataclasses.fields(EffectConfig)}
    coerced: dict[str, Any] = {}
    for k, v in raw.items():
        if k not in defaults:
            raise EffectConfigError(
                f"Unknown config key {k!r}, valid keys: {sorted(defaults)}"
            )
        try:
            coerced[k] = coerce_value(v, type(defaults[k]))
        except ValueError:
            raise EffectConfigError(f"Invalid value for {k}: {v!r}") from None
    return coerced
