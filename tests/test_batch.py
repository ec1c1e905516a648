"""Tests for wavfx.batch (recursive directory processing)."""

import wave
from pathlib import Path

import numpy as np
import pytest

from wavfx.batch import (
    FAILED,
    PROCESSED,
    find_wav_files,
    mirror_path,
    plan,
    process_file,
    run_batch,
)
from wavfx.config import EffectConfig, EffectConfigError
from wavfx.io import read_wav


def _write(path: Path, frames: int = 1600, n_channels: int = 1, framerate: int = 16000):
    path.parent.mkdir(parents=True, exist_ok=True)
    t = np.arange(frames * n_channels) / framerate
    data = (0.3 * np.sin(2 * np.pi * 330.0 * t) * 32767).astype("<i2")
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(n_channels)
        wf.setsampwidth(2)
        wf.setframerate(framerate)
        wf.writeframes(data.tobytes())
    return path


@pytest.fixture
def tree(tmp_path):
    """Input tree with nested WAVs, a non-WAV file and an unsupported WAV."""
    root = tmp_path / "in"
    _write(root / "a.wav", frames=800)
    _write(root / "sub" / "b.wav", frames=1200)
    _write(root / "sub" / "deeper" / "C.WAV", frames=400)
    (root / "notes.txt").write_text("not audio")
    (root / "sub" / "fake.wav.bak").write_text("nope")
    return root


@pytest.fixture
def bad_tree(tree):
    _write(tree / "stereo.wav", n_channels=2)
    (tree / "sub" / "broken.wav").write_bytes(b"RIFF....WAVE")
    return tree


CONFIG = EffectConfig(effect="echo", wet=0.4, delay_ms=20.0, decay_time_s=0.3)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    def test_find_wav_files(self, tree):
        found = [p.relative_to(tree).as_posix() for p in find_wav_files(tree)]
        assert found == ["a.wav", "sub/b.wav", "sub/deeper/C.WAV"]

    def test_follows_symlinked_dirs(self, tree, tmp_path):
        other = tmp_path / "elsewhere"
        _write(other / "linked.wav")
        (tree / "link").symlink_to(other, target_is_directory=True)
        names = [p.name for p in find_wav_files(tree)]
        assert "linked.wav" in names

    def test_symlink_cycle_visited_once(self, tmp_path):
        root = tmp_path / "in"
        _write(root / "sub" / "a.wav")
        (root / "sub" / "loop").symlink_to(root, target_is_directory=True)
        found = [p.relative_to(root).as_posix() for p in find_wav_files(root)]
        assert found == ["sub/a.wav"]

    def test_symlink_cycle_batch(self, tmp_path):
        root = tmp_path / "in"
        _write(root / "sub" / "a.wav")
        (root / "sub" / "loop").symlink_to(root, target_is_directory=True)
        report = run_batch(root, tmp_path / "out", CONFIG)
        assert report.processed == 1
        assert not (tmp_path / "out" / "sub" / "loop").exists()

    def test_mirror_path(self, tmp_path):
        out =mirror_path(tmp_path / "in" / "x" / "y.wav", tmp_path / "in", tmp_path / "out")
        assert out == tmp_path / "out" / "x" / "y.wav"

    def test_plan(self, tree, tmp_path):
        pairs = plan(tree, tmp_path / "out")
        assert [dst.relative_to(tmp_path / "out").as_posix() for _, dst in pairs] == [
            "a.wav",
            "sub/b.wav",
            "sub/deeper/C.WAV",
        ]

    def test_missing_input_dir(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            plan(tmp_path / "missing", tmp_path / "out")

    def test_same_dir_rejected(self, tree):
        with pytest.raises(ValueError, match="differ"):
            plan(tree, tree)


# ---------------------------------------------------------------------------
# Single file
# ---------------------------------------------------------------------------


class TestProcessFile:
    def test_success(self, tree, tmp_path):
        dst = tmp_path / "out" / "nested" / "a.wav"
        result = process_file(tree / "a.wav", dst, CONFIG)
        assert result.status == PROCESSED
        assert result.ok
        assert result.frames == 800
        assert dst.exists()
        assert not dst.with_name("a.wav.part").exists()
        assert read_wav(dst).frames == 800

    def test_unsupported_reported(self, bad_tree, tmp_path):
        dst = tmp_path / "out" / "stereo.wav"
        result = process_file(bad_tree / "stereo.wav", dst, CONFIG)
        assert result.status == FAILED
        assert "mono" in result.message
        assert not dst.exists()

    def test_unexpected_error_reported(self, tree, tmp_path, monkeypatch):
        from wavfx import effects

        def _boom(buf, config):
            raise MemoryError("out of memory")

        monkeypatch.setattr(effects, "apply", _boom)
        dst = tmp_path / "out" / "a.wav"
        result = process_file(tree / "a.wav", dst, CONFIG)
        assert result.status == FAILED
        assert result.message == "MemoryError: out of memory"
        assert not dst.exists()
        assert not dst.with_name("a.wav.part").exists()

    def test_wet_zero_copies_audio(self, tree, tmp_path):
        dst = tmp_path / "out" / "a.wav"
        process_file(tree / "a.wav", dst, CONFIG.replace(wet=0.0))
        src = read_wav(tree / "a.wav").to_pcm16().astype(np.int32)
        out = read_wav(dst).to_pcm16().astype(np.int32)
        assert np.max(np.abs(src - out)) <= 1


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class TestRunBatch:
    def test_mirrors_tree(self, tree, tmp_path):
        out = tmp_path / "out"
        report = run_batch(tree, out, CONFIG)
        assert report.ok
        assert report.processed == 3
        assert (out / "a.wav").exists()
        assert (out / "sub" / "b.wav").exists()
        assert (out / "sub" / "deeper" / "C.WAV").exists()
        assert not (out / "notes.txt").exists()
        assert read_wav(out / "sub" / "b.wav").frames == 1200

    def test_failures_do_not_stop_batch(self, bad_tree, tmp_path):
        out = tmp_path / "out"
        seen = []
        report = run_batch(bad_tree, out, CONFIG, on_result=seen.append)
        assert report.processed == 3
        assert report.failed == 2
        assert not report.ok
        assert len(seen) == 5
        failed = {r.input_path.name for r in report.results if not r.ok}
        assert failed == {"stereo.wav", "broken.wav"}
        assert not list(out.rglob("*.part"))

    def test_unexpected_error_does_not_stop_batch(self, tree, tmp_path, monkeypatch):
        from wavfx import effects

        real_apply = effects.apply

        def _flaky(buf, config):
            if buf.label.endswith("b.wav"):
                raise RuntimeError("engine crashed")
            return real_apply(buf, config)

        monkeypatch.setattr(effects, "apply", _flaky)
        report = run_batch(tree, tmp_path / "out", CONFIG)
        assert report.processed == 2
        assert report.failed == 1
        (bad,) = [r for r in report.results if not r.ok]
        assert bad.input_path.name == "b.wav"
        assert "RuntimeError" in bad.message

    def test_parallel_matches_serial(self, tree, tmp_path):
        serial = run_batch(tree, tmp_path / "serial", CONFIG, jobs=1)
        parallel = run_batch(tree, tmp_path / "parallel", CONFIG, jobs=2)
        assert parallel.processed == serial.processed == 3
        assert [r.input_path for r in parallel.results] == [
            r.input_path for r in serial.results
        ]
        for r in serial.results:
            rel = r.output_path.relative_to(tmp_path / "serial")
            a = read_wav(r.output_path).samples
            b = read_wav(tmp_path / "parallel" / rel).samples
            np.testing.assert_array_equal(a, b)

    def test_invalid_config_before_any_work(self, tree, tmp_path):
        out = tmp_path / "out"
        with pytest.raises(EffectConfigError):
            run_batch(tree, out, CONFIG.replace(wet=2.0))
        assert not out.exists()

    def test_invalid_jobs(self, tree, tmp_path):
        with pytest.raises(ValueError, match="jobs"):
            run_batch(tree, tmp_path / "out", CONFIG, jobs=0)

    def test_empty_tree(self, tmp_path):
        (tmp_path / "in").mkdir()
        report = run_batch(tmp_path / "in", tmp_path / "out", CONFIG)
        assert report.ok
        assert report.processed == 0
        assert (tmp_path / "out").is_dir()

    def test_sample_rate_filter(self, tmp_path):
        root = tmp_path / "in"
        _write(root / "hi.wav", framerate=44100)
        strict = run_batch(root, tmp_path / "o1", CONFIG)
        assert strict.failed == 1
        relaxed = run_batch(root, tmp_path / "o2", CONFIG, sample_rate=None)
        assert relaxed.processed == 1
        assert read_wav(tmp_path / "o2" / "hi.wav", sample_rate=44100).sample_rate == 44100.0
