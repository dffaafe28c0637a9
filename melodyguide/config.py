"""Tunable constants for pitch tracking and the timeline display."""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GuideConfig:
    """Configuration shared by the estimator, timeline, session and renderer."""
    fft_size: int = 2048
    sample_rate: int = 44_100
    min_voice_hz: float = 80.0        # lower edge of the searched vocal range
    max_voice_hz: float = 3000.0      # upper edge of the searched vocal range
    silence_threshold: float = 20.0   # mean byte magnitude, empirically chosen
    window_seconds: float = 4.0       # width of one displayed time window
    pitch_offset: int = 48            # lowest displayed pitch (C3)
    pitch_range: int = 36             # displayed semitones
    fps: int = 30                     # analysis ticks per second
    octave_floor: int = 60            # C4, octave-correction floor

    def __post_init__(self):
        if self.fft_size <= 0 or self.fft_size & (self.fft_size - 1):
            raise ValueError(f"fft_size must be a positive power of two, got {self.fft_size}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not 0 < self.min_voice_hz < self.max_voice_hz:
            raise ValueError(
                f"Need 0 < min_voice_hz < max_voice_hz, "
                f"got {self.min_voice_hz} and {self.max_voice_hz}"
            )
        if self.window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {self.window_seconds}")
        if self.pitch_range <= 0:
            raise ValueError(f"pitch_range must be positive, got {self.pitch_range}")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.lo_bin < 1:
            raise ValueError(
                f"min_voice_hz must reach past the DC bin ({self.bin_hz:.1f} Hz), "
                f"got {self.min_voice_hz}"
            )
        if self.lo_bin >= self.hi_bin:
            raise ValueError("Vocal range is narrower than one frequency bin")

    @property
    def bin_count(self) -> int:
        """Number of magnitude samples in one spectral frame."""
        return self.fft_size // 2

    @property
    def bin_hz(self) -> float:
        """Width of one frequency bin in Hz."""
        return self.sample_rate / self.fft_size

    @property
    def lo_bin(self) -> int:
        return int(math.floor(self.min_voice_hz / self.bin_hz))

    @property
    def hi_bin(self) -> int:
        return min(self.bin_count, int(math.floor(self.max_voice_hz / self.bin_hz)))

    @property
    def tick_interval(self) -> float:
        """Seconds between two analysis ticks."""
        return 1.0 / self.fps
