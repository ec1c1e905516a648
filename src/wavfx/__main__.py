"""wavfx CLI -- apply echo, reverb or chorus to WAV directory trees."""

from __future__ import annotations

import argparse
import json
import sys

from wavfx import __version__
from wavfx.config import (
    DEFAULT_CHORUS_DEPTH_MS,
    DEFAULT_CHORUS_RATE_HZ,
    DEFAULT_DAMPING,
    DEFAULT_DECAY_TIME_S,
    DEFAULT_DELAY_MS,
    DEFAULT_EFFECT,
    DEFAULT_WET,
    EFFECTS,
    EffectConfig,
    EffectConfigError,
)
from wavfx.io import REQUIRED_SAMPLE_RATE


# ---------------------------------------------------------------------------
# Verbosity levels
# ---------------------------------------------------------------------------

QUIET = 0
NORMAL = 1
VERBOSE = 2


def _verbosity(args: argparse.Namespace) -> int:
    """Return verbosity level from parsed args."""
    if getattr(args, "quiet", False):
        return QUIET
    if getattr(args, "verbose", False):
        return VERBOSE
    return NORMAL


def _log(args: argparse.Namespace, msg: str, level: int = NORMAL) -> None:
    """Print *msg* if verbosity >= *level*."""
    if _verbosity(args) >= level:
        print(msg)


def _log_verbose(args: argparse.Namespace, msg: str) -> None:
    """Print only when --verbose."""
    _log(args, msg, level=VERBOSE)


def _fail(msg: str, code: int = 1) -> None:
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Flags that map onto EffectConfig fields.  Their argparse default is None so
# that only values given on the command line override a preset.
_CONFIG_FLAGS = (
    "effect",
    "wet",
    "delay_ms",
    "decay_time_s",
    "chorus_rate_hz",
    "chorus_depth_ms",
    "damping",
)


def _resolve_config(args: argparse.Namespace) -> EffectConfig:
    """Build the effective config: defaults < preset < --set < explicit flags."""
    from wavfx._cli import PRESETS, coerce_overrides, parse_override, preset_config

    config = EffectConfig()
    if args.preset:
        if args.preset not in PRESETS:
            _fail(f"Unknown preset: {args.preset!r}")
        config = preset_config(args.preset, config)

    try:
        if args.set:
            raw = dict(parse_override(token) for token in args.set)
            config = config.replace(**coerce_overrides(raw))

        flags = {
            name: getattr(args, name)
            for name in _CONFIG_FLAGS
            if getattr(args, name) is not None
        }
        config = config.replace(**flags)
        config.validate()
    except ValueError as e:
        _fail(str(e))
    return config


def _sample_rate_arg(args: argparse.Namespace) -> int | None:
    return args.sample_rate or None


# ---------------------------------------------------------------------------
# Subcommand: process
# ---------------------------------------------------------------------------


def _print_dry_run(args: argparse.Namespace, config: EffectConfig) -> None:
    from wavfx.batch import plan

    try:
        pairs = plan(args.input_dir, args.output_dir)
    except ValueError as e:
        _fail(str(e))

    if args.json:
        print(
            json.dumps(
                {
                    "config": config.to_dict(),
                    "sample_rate": _sample_rate_arg(args),
                    "jobs": args.jobs,
                    "files": [
                        {"input": str(src), "output": str(dst)} for src, dst in pairs
                    ],
                },
                indent=2,
            )
        )
        return

    print("Config:")
    for k, v in config.to_dict().items():
        print(f"  {k}: {v}")
    print()
    n = len(pairs)
    label = "file" if n == 1 else "files"
    print(f"Input: {n} {label}")
    for src, dst in pairs:
        print(f"  {src} -> {dst}")


def cmd_process(args: argparse.Namespace) -> None:
    """Apply one effect to every WAV file under the input directory."""
    from wavfx.batch import FileResult, run_batch

    config = _resolve_config(args)

    if args.dry_run:
        _print_dry_run(args, config)
        return

    if args.jobs < 1:
        _fail(f"--jobs must be >= 1, got {args.jobs}")

    if not args.json:
        _log_verbose(args, f"  Effect: {config.effect} ({config.to_dict()})")

    def _report(result: FileResult) -> None:
        if result.ok:
            # stdout carries only the summary in JSON mode
            if args.json:
                return
            _log(args, f"Wrote {result.output_path}")
            _log_verbose(
                args,
                f"  {result.frames} frames in {result.elapsed_s * 1000:.1f} ms",
            )
        else:
            print(f"Error processing {result.input_path}: {result.message}", file=sys.stderr)

    try:
        report = run_batch(
            args.input_dir,
            args.output_dir,
            config,
            jobs=args.jobs,
            sample_rate=_sample_rate_arg(args),
            on_result=_report,
        )
    except ValueError as e:
        _fail(str(e))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        sys.exit(130)

    if args.json:
        print(
            json.dumps(
                {
                    "processed": report.processed,
                    "failed": report.failed,
                    "files": [
                        {
                            "input": str(r.input_path),
                            "output": str(r.output_path),
                            "status": r.status,
                            "message": r.message,
                        }
                        for r in report.results
                    ],
                },
                indent=2,
            )
        )
    else:
        _log(args, f"Processed {report.processed} file(s), {report.failed} failed")

    if not report.ok:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Subcommand: info
# ---------------------------------------------------------------------------


def cmd_info(args: argparse.Namespace) -> None:
    """Print WAV header metadata and levels."""
    from wavfx._helpers import _amplitude_to_db
    from wavfx.io import read_wav, wav_info

    try:
        info = wav_info(args.file)
    except ValueError as e:
        _fail(str(e))

    info = {"path": str(args.file), **info}
    info["duration"] = f"{info['duration']:.3f}s"
    try:
        buf = read_wav(args.file, sample_rate=None)
    except ValueError as e:
        # Still report the header for files the effects cannot take.
        info["supported"] = False
        info["reason"] = str(e)
    else:
        peak_db = _amplitude_to_db(buf.peak)
        rms_db = _amplitude_to_db(buf.rms)
        info["supported"] = True
        info["peak_db"] = f"{peak_db:.1f}"
        info["rms_db"] = f"{rms_db:.1f}"

    if args.json:
        print(json.dumps(info, indent=2))
    else:
        for k, v in info.items():
            print(f"  {k}: {v}")


# ---------------------------------------------------------------------------
# Subcommand: preset
# ---------------------------------------------------------------------------


def cmd_preset(args: argparse.Namespace) -> None:
    """List presets or show one."""
    from wavfx._cli import PRESETS, get_preset_categories

    subcmd = args.preset_action

    if subcmd == "list":
        cats = get_preset_categories()
        filter_cat = args.category
        if filter_cat:
            names = cats.get(filter_cat, [])
            if not names:
                print(f"No presets in category: {filter_cat!r}")
                return
            selected = {filter_cat: names}
        else:
            selected = cats
        for cat in sorted(selected):
            print(f"\n  {cat}:")
            for name in sorted(selected[cat]):
                desc = PRESETS[name].get("description", "")
                print(f"    {name:16s} {desc}")
        print()

    elif subcmd == "info":
        name = args.name
        if name not in PRESETS:
            _fail(f"Unknown preset: {name!r}")
        preset = PRESETS[name]
        print(f"\n  {name}")
        print(f"  Category: {preset.get('category', 'other')}")
        print(f"  Description: {preset.get('description', '')}")
        print("  Settings:")
        for k, v in preset["config"].items():
            print(f"    {k}: {v}")
        print()

    else:
        print("Usage: wavfx preset {list,info}", file=sys.stderr)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser."""
    parser = argparse.ArgumentParser(
        prog="wavfx",
        description="Add echo, reverb, or chorus effects to WAV files recursively",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"wavfx {__version__}",
    )

    # Global verbosity flags (mutually exclusive)
    verb_group = parser.add_mutually_exclusive_group()
    verb_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show details about each file)",
    )
    verb_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all non-essential output",
    )

    sub = parser.add_subparsers(dest="command")

    # --- process ---
    p_proc = sub.add_parser("process", help="Apply an effect to a WAV directory tree")
    p_proc.add_argument(
        "input_dir",
        help="Input directory containing WAV files (processed recursively)",
    )
    p_proc.add_argument(
        "output_dir",
        help="Output directory for processed files (preserves relative structure)",
    )
    p_proc.add_argument(
        "-e",
        "--effect",
        choices=EFFECTS,
        type=str.lower,
        help=f"Effect type (default: {DEFAULT_EFFECT})",
    )
    p_proc.add_argument(
        "-w",
        "--wet",
        type=float,
        help=f"Wet/dry mix, 0.0 dry to 1.0 wet (default: {DEFAULT_WET})",
    )
    p_proc.add_argument(
        "-d",
        "--delay-ms",
        type=float,
        help=f"Base delay time in milliseconds (default: {DEFAULT_DELAY_MS:g})",
    )
    p_proc.add_argument(
        "-t",
        "--decay-time-s",
        type=float,
        help=f"Decay time in seconds, RT60 approximation (default: {DEFAULT_DECAY_TIME_S})",
    )
    p_proc.add_argument(
        "--chorus-rate-hz",
        type=float,
        help=f"Chorus modulation rate in Hz (default: {DEFAULT_CHORUS_RATE_HZ})",
    )
    p_proc.add_argument(
        "--chorus-depth-ms",
        type=float,
        help=f"Chorus modulation depth in ms (default: {DEFAULT_CHORUS_DEPTH_MS:g})",
    )
    p_proc.add_argument(
        "--damping",
        type=float,
        help=f"Reverb high-frequency damping in [0, 1) (default: {DEFAULT_DAMPING})",
    )
    p_proc.add_argument(
        "-p",
        "--preset",
        metavar="NAME",
        help="Start from a named preset (explicit flags still override it)",
    )
    p_proc.add_argument(
        "-s",
        "--set",
        action="append",
        metavar="KEY=VALUE",
        help="Override a config field (repeatable)",
    )
    p_proc.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)",
    )
    p_proc.add_argument(
        "--sample-rate",
        type=int,
        default=REQUIRED_SAMPLE_RATE,
        help=f"Required input sample rate, 0 for any (default: {REQUIRED_SAMPLE_RATE})",
    )
    p_proc.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Show the config and file mapping without reading or writing files",
    )
    p_proc.add_argument("--json", action="store_true", help="Output as JSON")

    # --- info ---
    p_info = sub.add_parser("info", help="Show WAV file metadata")
    p_info.add_argument("file", help="Input WAV file")
    p_info.add_argument("--json", action="store_true", help="Output as JSON")

    # --- preset ---
    p_preset = sub.add_parser("preset", help="List and inspect presets")
    p_preset_sub = p_preset.add_subparsers(dest="preset_action")

    p_plist = p_preset_sub.add_parser("list", help="List presets")
    p_plist.add_argument("category", nargs="?", help="Filter by category")

    p_pinfo = p_preset_sub.add_parser("info", help="Show preset details")
    p_pinfo.add_argument("name", help="Preset name")

    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    dispatch = {
        "process": cmd_process,
        "info": cmd_info,
        "preset": cmd_preset,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    handler(args)


if __name__ == "__main__":
    main()
