"""Shared test fixtures."""
from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from melodyguide.estimation import SpectralFrame


SR = 44_100
FFT = 2048


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _make_frame(peaks: dict[int, float] | None = None, floor: float = 0.0) -> SpectralFrame:
    """Spectral frame of FFT // 2 bins at *floor*, with *peaks* set by bin index."""
    mags = np.full(FFT // 2, floor, dtype=np.float64)
    for index, value in (peaks or {}).items():
        mags[index] = value
    return SpectralFrame(mags, sample_rate=SR, fft_size=FFT)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_frame():
    """Factory for spectral frames: ``make_frame({bin: magnitude}, floor=...)``."""
    return _make_frame


def _write_sine(path: Path, freq: float, duration: float, amplitude: float, sr: int = SR) -> Path:
    t = np.linspace(0, duration, int(sr * duration), endpoint=False)
    audio = (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    sf.write(str(path), audio, sr)
    return path


@pytest.fixture(scope="session")
def sine_220hz_wav(tmp_path_factory) -> Path:
    """Generate a 2-second quiet 220Hz (A3) sine wave WAV file."""
    path = tmp_path_factory.mktemp("fixtures") / "sine_220hz.wav"
    return _write_sine(path, 220.0, 2.0, 0.05)


@pytest.fixture(scope="session")
def sine_440hz_22k_wav(tmp_path_factory) -> Path:
    """Generate a 1-second 440Hz (A4) sine wave at 22.05 kHz."""
    path = tmp_path_factory.mktemp("fixtures") / "sine_440hz_22k.wav"
    return _write_sine(path, 440.0, 1.0, 0.05, sr=22_050)


@pytest.fixture(scope="session")
def silence_wav(tmp_path_factory) -> Path:
    """Generate a 2-second silent WAV file."""
    audio = np.zeros(SR * 2, dtype=np.float32)
    path = tmp_path_factory.mktemp("fixtures") / "silence.wav"
    sf.write(str(path), audio, SR)
    return path


@pytest.fixture
def silhouette_data() -> dict:
    """A short reference melody: C4 D4 E4 F4 G4, half a second each, 1s delay."""
    return {
        "delay": 1.0,
        "tracks": [
            {"notes": [
                {"time": 0.0, "midi": 60, "duration": 0.5},
                {"time": 0.5, "midi": 62, "duration": 0.5},
                {"time": 1.0, "midi": 64, "duration": 0.5},
                {"time": 3.0, "midi": 65, "duration": 0.5},
                {"time": 3.5, "midi": 67, "duration": 1.0},
            ]},
        ],
    }


@pytest.fixture
def silhouette_json(tmp_path, silhouette_data) -> Path:
    path = tmp_path / "silhouette.json"
    path.write_text(json.dumps(silhouette_data), encoding="utf-8")
    return path
