"""Recursive batch processing of WAV directory trees.

Every ``*.wav`` file under the input root is read, run through one effect and
written to the same relative path under the output root.  Files are
independent, so ``jobs > 1`` spreads them over worker processes.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from wavfx import effects
from wavfx.config import EffectConfig
from wavfx.io import REQUIRED_SAMPLE_RATE, read_wav, write_wav

PROCESSED = "processed"
FAILED = "failed"


@dataclass
class FileResult:
    """Outcome of one input file."""

    input_path: Path
    output_path: Path
    status: str
    message: str = ""
    frames: int = 0
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == PROCESSED


@dataclass
class BatchReport:
    results: list[FileResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def ok(self) -> bool:
        return self.failed == 0


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_wav_files(root: str | Path) -> list[Path]:
    """All regular ``.wav`` files under *root* (any case), following symlinks.

    Each directory is entered once, so a link back to an ancestor is skipped.
    """
    root = Path(root)
    found: list[Path] = []
    visited: set[tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        st = os.stat(dirpath)
        key = (st.st_dev, st.st_ino)
        if key in visited:
            dirnames[:] = []
            continue
        visited.add(key)
        for name in filenames:
            p = Path(dirpath) / name
            if p.suffix.lower() == ".wav" and p.is_file():
                found.append(p)
    return sorted(found)


def mirror_path(input_path: str | Path, input_root: str | Path, output_root: str | Path) -> Path:
    """Re-root *input_path* from *input_root* to *output_root*."""
    rel = Path(input_path).relative_to(Path(input_root))
    return Path(output_root) / rel


def plan(input_dir: str | Path, output_dir: str | Path) -> list[tuple[Path, Path]]:
    """``(input, output)`` pairs for every WAV file under *input_dir*."""
    _check_dirs(input_dir, output_dir)
    return [
        (p, mirror_path(p, input_dir, output_dir)) for p in find_wav_files(input_dir)
    ]


def _check_dirs(input_dir: str | Path, output_dir: str | Path) -> None:
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        raise ValueError(f"Input directory not found: {input_dir}")
    if input_dir.resolve() == Path(output_dir).resolve():
        raise ValueError("Output directory must differ from the input directory")


# ---------------------------------------------------------------------------
# Per-file work
# ---------------------------------------------------------------------------


def process_file(
    input_path: str | Path,
    output_path: str | Path,
    config: EffectConfig,
    sample_rate: int | None = REQUIRED_SAMPLE_RATE,
) -> FileResult:
    """Read, process and write one file.

    The output is written to a ``.part`` sibling and renamed into place, so an
    interrupted run never leaves a truncated file under the final name.
    Errors while handling the file are returned in the result, not raised.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    tmp_path = output_path.with_name(output_path.name + ".part")
    t0 = time.perf_counter()
    try:
        buf = read_wav(input_path, sample_rate=sample_rate)
        out = effects.apply(buf, config)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        write_wav(tmp_path, out)
        os.replace(tmp_path, output_path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        if isinstance(e, (ValueError, OSError)):
            message = str(e)
        else:
            message = f"{type(e).__name__}: {e}"
        return FileResult(
            input_path,
            output_path,
            FAILED,
            message=message,
            elapsed_s=time.perf_counter() - t0,
        )
    return FileResult(
        input_path,
        output_path,
        PROCESSED,
        frames=out.frames,
        elapsed_s=time.perf_counter() - t0,
    )


# ---------------------------------------------------------------------------
# Batch driver
# ---------------------------------------------------------------------------


def run_batch(
    input_dir: str | Path,
    output_dir: str | Path,
    config: EffectConfig,
    jobs: int = 1,
    sample_rate: int | None = REQUIRED_SAMPLE_RATE,
    on_result: Callable[[FileResult], None] | None = None,
) -> BatchReport:
    """Process every WAV file under *input_dir* into *output_dir*.

    Parameters
    ----------
    input_dir, output_dir : str or Path
        Input root (searched recursively) and output root (created).
    config : EffectConfig
        Validated once here; an invalid config raises before any file is read.
    jobs : int
        Worker processes; 1 processes files in this process.
    sample_rate : int or None
        Required input sample rate, ``None`` for any.
    on_result : callable or None
        Called with each FileResult as it completes.
    """
    if jobs < 1:
        raise ValueError(f"jobs must be >= 1, got {jobs}")
    config.validate()
    pairs = plan(input_dir, output_dir)
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    report = BatchReport()

    def _collect(result: FileResult) -> None:
        report.results.append(result)
        if on_result is not None:
            on_result(result)

    if jobs == 1 or len(pairs) <= 1:
        for src, dst in pairs:
            _collect(process_file(src, dst, config, sample_rate))
        return report

    executor = ProcessPoolExecutor(max_workers=jobs)
    interrupted = False
    try:
        futures = [
            executor.submit(process_file, src, dst, config, sample_rate)
            for src, dst in pairs
        ]
        for fut in as_completed(futures):
            _collect(fut.result())
    except KeyboardInterrupt:
        # In-flight files only ever produce .part files; drop the rest.
        interrupted = True
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    finally:
        if not interrupted:
            executor.shutdown(wait=True)
    report.results.sort(key=lambda r: r.input_path)
    return report
