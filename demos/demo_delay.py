#!/usr/bin/env python3
"""Demo: echo, reverb and chorus on a single file.

Renders each effect at a few settings so they can be compared side by side.
"""

import argparse
import os

import numpy as np

from wavfx.buffer import SampleBuffer
from wavfx.effects import chorus, echo, reverb
from wavfx.io import read_wav, write_wav


def peak_normalize(buf: SampleBuffer) -> SampleBuffer:
    """Scale so the loudest sample sits just under 0 dBFS."""
    peak = buf.peak
    if peak > 0:
        return buf.gain_db(-20.0 * np.log10(peak) - 0.1)
    return buf


def main():
    parser = argparse.ArgumentParser(description="Demo: delay effects")
    parser.add_argument("infile", help="Input .wav file (mono, 16-bit)")
    parser.add_argument(
        "-o", "--out-dir", default="build/demo-output", help="Output directory"
    )
    parser.add_argument(
        "-n", "--no-normalize", action="store_true", help="Skip peak normalization"
    )
    parser.add_argument(
        "--any-rate", action="store_true", help="Accept any input sample rate"
    )
    args = parser.parse_args()

    normalize = (lambda b: b) if args.no_normalize else peak_normalize
    os.makedirs(args.out_dir, exist_ok=True)
    buf = read_wav(args.infile, sample_rate=None if args.any_rate else 16000)
    name = os.path.splitext(os.path.basename(args.infile))[0]

    demos = [
        ("echo-slapback", lambda b: echo(b, wet=0.35, delay_ms=80.0, decay_time_s=0.2)),
        ("echo-quarter", lambda b: echo(b, wet=0.4, delay_ms=250.0, decay_time_s=1.5)),
        ("echo-long", lambda b: echo(b, wet=0.4, delay_ms=500.0, decay_time_s=4.0)),
        ("reverb-room", lambda b: reverb(b, wet=0.3, delay_ms=30.0, decay_time_s=0.6, damping=0.4)),
        ("reverb-hall", lambda b: reverb(b, wet=0.35, delay_ms=60.0, decay_time_s=1.8)),
        ("reverb-dark", lambda b: reverb(b, wet=0.4, delay_ms=70.0, decay_time_s=2.5, damping=0.8)),
        ("chorus-doubler", lambda b: chorus(b, wet=0.5, delay_ms=20.0, rate_hz=0.5, depth_ms=3.0)),
        ("chorus-wide", lambda b: chorus(b, wet=0.5, delay_ms=25.0, rate_hz=0.8, depth_ms=10.0)),
    ]

    for label, fn in demos:
        out = normalize(fn(buf))
        path = os.path.join(args.out_dir, f"{name}_{label}.wav")
        write_wav(path, out)
        print(f"  {label} -> {path}")


if __name__ == "__main__":
    main()
