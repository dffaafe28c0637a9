"""Fundamental-frequency estimation from one spectral magnitude frame.

The loudest bin inside the vocal range is taken as the fundamental, then
refined below bin resolution by fitting a parabola through the peak and its
two neighbours.
"""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from melodyguide.config import GuideConfig


@dataclass(frozen=True, eq=False)
class SpectralFrame:
    """Magnitudes of one analysis frame; bin ``i`` sits at ``i * sample_rate / fft_size`` Hz."""
    magnitudes: np.ndarray = field(repr=False)
    sample_rate: int
    fft_size: int

    def __post_init__(self):
        mags = np.asarray(self.magnitudes, dtype=np.float64)
        if mags.ndim != 1:
            raise ValueError(f"Magnitudes must be one-dimensional, got shape {mags.shape}")
        if not np.isfinite(mags).all():
            raise ValueError("Magnitudes must be finite")
        if mags.size and mags.min() < 0:
            raise ValueError("Magnitudes must be non-negative")
        mags = mags.copy()
        mags.setflags(write=False)
        object.__setattr__(self, "magnitudes", mags)

    def __len__(self) -> int:
        return len(self.magnitudes)

    @property
    def bin_hz(self) -> float:
        return self.sample_rate / self.fft_size


def bin_to_frequency(index: float, sample_rate: int, fft_size: int) -> float:
    """Convert a (possibly fractional) bin index to Hz."""
    return index * sample_rate / fft_size


def frequency_to_bin(freq_hz: float, sample_rate: int, fft_size: int) -> int:
    """Index of the bin containing *freq_hz*."""
    return int(np.floor(freq_hz * fft_size / sample_rate))


def _check_bounds(frame: SpectralFrame, lo_bin: int, hi_bin: int) -> None:
    if not 0 <= lo_bin < hi_bin <= len(frame):
        raise ValueError(
            f"Bin range [{lo_bin}, {hi_bin}) does not fit a frame of {len(frame)} bins"
        )


def frame_level(frame: SpectralFrame, lo_bin: int, hi_bin: int) -> float:
    """Mean magnitude over ``[lo_bin, hi_bin)``; drives the input-level meter."""
    _check_bounds(frame, lo_bin, hi_bin)
    return float(frame.magnitudes[lo_bin:hi_bin].mean())


def parabolic_offset(y0: float, y1: float, y2: float) -> float:
    """Sub-bin offset of the vertex of the parabola through three samples.

    *y1* is the peak. A flat segment (zero denominator) yields 0.
    """
    denom = 2 * y1 - y2 - y0
    if denom == 0:
        return 0.0
    return 0.5 * (y2 - y0) / denom


def estimate(
    frame: SpectralFrame,
    lo_bin: int,
    hi_bin: int,
    silence_threshold: float,
) -> float | None:
    """Estimate the fundamental frequency of a voice in *frame*.

    Args:
        frame: Spectral magnitudes of the current tick.
        lo_bin: First bin of the searched vocal range (inclusive).
        hi_bin: Last bin of the searched vocal range (exclusive).
        silence_threshold: Mean magnitude below which nobody is singing.

    Returns:
        Frequency in Hz, or None when the range is too quiet or peaks at DC.
    """
    _check_bounds(frame, lo_bin, hi_bin)
    voice = frame.magnitudes[lo_bin:hi_bin]
    if voice.mean() < silence_threshold:
        return None

    peak = int(np.argmax(voice))
    offset = 0.0
    # Peak on the edge of the range has no two-sided neighbourhood
    if 0 < peak < len(voice) - 1:
        y0, y1, y2 = voice[peak - 1:peak + 2]
        offset = parabolic_offset(float(y0), float(y1), float(y2))

    index = lo_bin + peak + offset
    # Bin 0 is the DC component, not a pitch
    if index <= 0:
        return None
    return bin_to_frequency(index, frame.sample_rate, frame.fft_size)


class PitchEstimator:
    """Binds the configured vocal range and silence threshold to :func:`estimate`."""

    def __init__(self, config: GuideConfig):
        self.config = config
        self.lo_bin = config.lo_bin
        self.hi_bin = config.hi_bin

    def estimate(self, frame: SpectralFrame) -> float | None:
        return estimate(frame, self.lo_bin, self.hi_bin, self.config.silence_threshold)

    def level(self, frame: SpectralFrame) -> float:
        return frame_level(frame, self.lo_bin, self.hi_bin)
