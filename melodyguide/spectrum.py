"""Offline analyser: recorded audio -> spectral frames.

Frames are scaled the way a browser ``AnalyserNode`` reports byte frequency
data (Blackman window, magnitude in dB mapped linearly onto 0-255), so a
recording replays through the estimator with the same silence threshold as
live input.
"""
from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator

import numpy as np
import soundfile as sf

from melodyguide.estimation import SpectralFrame


def load_audio(audio_path: str | Path, target_sr: int = 44_100) -> np.ndarray:
    """Read a recording for offline replay, downmixed to mono float32.

    Containers libsndfile cannot open are first transcoded to WAV with
    ffmpeg; a recording at another rate is resampled to *target_sr* so its
    frames line up with the configured bin scale.
    """
    audio_path = Path(audio_path)
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    try:
        audio_np, sr = sf.read(str(audio_path), always_2d=True)
    except sf.LibsndfileError:
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(suffix=".wav")
            os.close(fd)
            subprocess.run(
                ["ffmpeg", "-i", str(audio_path), "-ar", str(target_sr),
                 "-ac", "1", "-f", "wav", "-y", tmp_path],
                capture_output=True, check=True,
            )
            audio_np, sr = sf.read(tmp_path, always_2d=True)
        finally:
            if tmp_path:
                os.unlink(tmp_path)

    # (samples, channels) -> mono
    audio_np = audio_np.mean(axis=1).astype(np.float32)

    if sr != target_sr:
        import librosa
        audio_np = librosa.resample(audio_np, orig_sr=sr, target_sr=target_sr)

    return audio_np


def byte_spectrum(
    chunk: np.ndarray,
    min_db: float = -100.0,
    max_db: float = -30.0,
) -> np.ndarray:
    """Byte-scaled magnitude spectrum (``len(chunk) // 2`` bins) of one chunk."""
    n = len(chunk)
    window = np.blackman(n)
    spectrum = np.abs(np.fft.rfft(chunk * window))[: n // 2] / n
    with np.errstate(divide="ignore"):
        db = 20 * np.log10(spectrum)
    scaled = 255.0 / (max_db - min_db) * (db - min_db)
    return np.clip(np.nan_to_num(scaled, neginf=0.0), 0, 255)


def analyse(
    audio: np.ndarray,
    sample_rate: int,
    fft_size: int = 2048,
    hop: int | None = None,
    smoothing: float = 0.0,
    min_db: float = -100.0,
    max_db: float = -30.0,
) -> Iterator[SpectralFrame]:
    """Yield one spectral frame per *hop* samples of *audio*.

    Args:
        audio: Mono float32 samples.
        sample_rate: Sample rate in Hz.
        fft_size: Transform size; each frame has ``fft_size // 2`` bins.
        hop: Samples between frames. Default is one tick at 30 fps.
        smoothing: Exponential averaging of magnitudes across frames (0-1).
        min_db, max_db: dB range mapped onto 0-255.
    """
    if not 0.0 <= smoothing < 1.0:
        raise ValueError(f"smoothing must be in [0, 1), got {smoothing}")
    if hop is None:
        hop = sample_rate // 30
    if hop <= 0:
        raise ValueError(f"hop must be positive, got {hop}")

    audio = np.asarray(audio, dtype=np.float32)
    previous: np.ndarray | None = None
    for start in range(0, len(audio) - fft_size + 1, hop):
        mags = byte_spectrum(audio[start:start + fft_size], min_db, max_db)
        if previous is not None and smoothing > 0:
            mags = smoothing * previous + (1 - smoothing) * mags
        previous = mags
        yield SpectralFrame(mags, sample_rate=sample_rate, fft_size=fft_size)
