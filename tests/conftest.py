"""
VoxAnalysis v1 Test Configuration

Provides builders and fixtures for in-memory WAV inputs.
"""

import io
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf


REPO_ROOT = Path(__file__).parent.parent

SR = 44100


def run_cli(*args: str, cwd: str | None = None) -> subprocess.CompletedProcess:
    """Run voxanalysis CLI as subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "voxanalysis", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def wav_bytes(
    samples: np.ndarray,
    sample_rate: int = SR,
    subtype: str = "FLOAT",
) -> bytes:
    """
    Encode samples as an in-memory WAV container.

    Args:
        samples: 1D (mono) or 2D (frames, channels) array
        sample_rate: Sample rate in Hz
        subtype: libsndfile subtype (e.g. "PCM_16", "FLOAT")
    """
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format="WAV", subtype=subtype)
    return buf.getvalue()


def constant(value: float, duration_sec: float, sample_rate: int = SR) -> np.ndarray:
    """Constant-amplitude mono signal."""
    return np.full(int(sample_rate * duration_sec), value, dtype=np.float64)


def step_signal(
    low: float = 0.02,
    high: float = 0.5,
    duration_sec: float = 1.0,
    sample_rate: int = SR,
) -> np.ndarray:
    """`low` for duration_sec, then `high` for duration_sec."""
    return np.concatenate([
        constant(low, duration_sec, sample_rate),
        constant(high, duration_sec, sample_rate),
    ])


def tone(
    freq: float = 440.0,
    amplitude: float = 0.5,
    duration_sec: float = 1.0,
    sample_rate: int = SR,
) -> np.ndarray:
    """Deterministic sine tone."""
    t = np.arange(int(sample_rate * duration_sec)) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


@pytest.fixture
def tone_wav() -> bytes:
    """One second of 440 Hz at half scale, 16-bit PCM mono."""
    return wav_bytes(tone(), subtype="PCM_16")


@pytest.fixture
def step_wav() -> bytes:
    """Near-silent second followed by a loud second, float mono."""
    return wav_bytes(step_signal())


@pytest.fixture
def silent_wav() -> bytes:
    """One second of digital silence, float mono."""
    return wav_bytes(constant(0.0, 1.0))


@pytest.fixture
def tone_wav_path(tmp_path, tone_wav) -> Path:
    """Write the tone fixture to disk and return its path."""
    path = tmp_path / "tone.wav"
    path.write_bytes(tone_wav)
    return path
