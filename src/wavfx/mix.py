"""Wet/dry mixing."""

from __future__ import annotations


def mix(dry, wet, wet_ratio: float):
    """Blend ``dry * (1 - wet_ratio) + wet * wet_ratio``.

    Works elementwise on floats or numpy arrays.  No clamping is applied;
    the output stage clamps when quantizing.
    """
    return dry * (1.0 - wet_ratio) + wet * wet_ratio
