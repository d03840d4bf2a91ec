"""
rainmix Test Configuration

Provides a recording fake engine and fixtures for synthesized WAV input.
"""

import shutil
import subprocess
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from rainmix.config import RenderConfig
from rainmix.probe import ProbedDuration
from rainmix.workspace import derive_paths


requires_ffmpeg = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="ffmpeg and ffprobe are required",
)


class FakeEngine:
    """
    Stand-in for FFmpegEngine that records invocations.

    Each run() writes a small placeholder to the invocation's output
    (always the last argument), so later stages find their inputs.
    """

    def __init__(
        self,
        available: bool = True,
        duration: str = "60.023000",
        fail_on: str | None = None,
        returncode: int = 1,
        probe_error: Exception | None = None,
    ):
        self.available = available
        self.duration = duration
        self.fail_on = fail_on
        self.returncode = returncode
        self.probe_error = probe_error
        self.calls: list[list[str]] = []
        self.probes: list[Path] = []

    def is_available(self) -> bool:
        return self.available

    def run(self, args) -> None:
        args = list(args)
        self.calls.append(args)
        output = Path(args[-1])
        if self.fail_on is not None and output.name == self.fail_on:
            raise subprocess.CalledProcessError(
                self.returncode, ["ffmpeg", *args], stderr="Error while filtering\n"
            )
        output.write_bytes(b"rendered:" + output.name.encode())

    def probe_duration(self, path: Path) -> str:
        self.probes.append(Path(path))
        if self.probe_error is not None:
            raise self.probe_error
        return self.duration

    def outputs(self) -> list[str]:
        """Output file names, in call order."""
        return [Path(call[-1]).name for call in self.calls]


def write_wav(path: Path, samples: np.ndarray, sample_rate: int) -> None:
    """Write samples (float, [-1, 1]) to a PCM 16-bit WAV, hard clipping first."""
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    sf.write(str(path), clipped, sample_rate, subtype="PCM_16")


def create_test_wav(path: Path, duration_sec: float = 1.0, sample_rate: int = 44100) -> None:
    """
    Create a deterministic rain-like WAV file.

    Low-level seeded noise with sparse "drops" (short decaying clicks).
    """
    rng = np.random.default_rng(1234)
    num_samples = int(sample_rate * duration_sec)
    samples = 0.05 * rng.standard_normal(num_samples)

    drop = 0.5 * np.exp(-np.arange(200) / 30.0)
    for start in rng.integers(0, max(num_samples - 200, 1), size=int(40 * duration_sec)):
        samples[start:start + 200] += drop[: num_samples - start]

    write_wav(path, samples, sample_rate)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_engine():
    """Factory for FakeEngine with custom behavior."""
    return FakeEngine


@pytest.fixture
def rain_input(tmp_path) -> Path:
    """An input file with placeholder bytes (the fake engine never reads it)."""
    path = tmp_path / "rain.wav"
    path.write_bytes(b"RIFF placeholder")
    return path


@pytest.fixture
def test_wav_path(tmp_path) -> Path:
    """A real one-second WAV."""
    path = tmp_path / "test_input.wav"
    create_test_wav(path, duration_sec=1.0)
    return path


@pytest.fixture
def paths(rain_input):
    return derive_paths(rain_input)


@pytest.fixture
def config() -> RenderConfig:
    return RenderConfig()


@pytest.fixture
def duration() -> ProbedDuration:
    return ProbedDuration(60, probed=True)
