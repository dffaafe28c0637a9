"""Pitch mapping: Hz <-> fractional pitch number, octave correction, note names."""
from __future__ import annotations

import math

import numpy as np


NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F",
              "F#", "G", "G#", "A", "A#", "B"]

# Anchor of the equal-tempered scale: A4 = MIDI 69 = 440 Hz
_REFERENCE_PITCH = 69
_REFERENCE_HZ = 440.0

DEFAULT_OCTAVE_FLOOR = 60  # C4


class InvalidFrequencyError(ValueError):
    """Raised when a non-positive or non-finite frequency is converted."""
    pass


def frequency_to_pitch(freq_hz: float) -> float:
    """Convert frequency in Hz to a fractional pitch number (440.0 -> 69.0)."""
    if not math.isfinite(freq_hz) or freq_hz <= 0:
        raise InvalidFrequencyError(f"Frequency must be positive, got {freq_hz}")
    return float(_REFERENCE_PITCH + 12 * np.log2(freq_hz / _REFERENCE_HZ))


def pitch_to_frequency(pitch: float) -> float:
    """Convert a (fractional) pitch number back to Hz."""
    return float(_REFERENCE_HZ * 2.0 ** ((pitch - _REFERENCE_PITCH) / 12.0))


def correct_octave(pitch: float, floor: float = DEFAULT_OCTAVE_FLOOR) -> tuple[float, bool]:
    """Lift a pitch sung (or detected) an octave or two below *floor*.

    A pitch under the floor is raised by one octave; if it is then still more
    than an octave below the floor it is raised once more. Never more than
    24 semitones in total, so the result can remain below the floor.

    Returns the corrected pitch and whether any correction was applied.
    """
    if pitch >= floor:
        return pitch, False
    pitch += 12
    if pitch < floor - 12:
        pitch += 12
    return pitch, True


def pitch_to_note_name(pitch: float) -> str:
    """Nearest note in scientific pitch notation (e.g., 60 -> 'C4', 69.3 -> 'A4')."""
    midi_number = int(round(pitch))
    octave = (midi_number // 12) - 1
    note = NOTE_NAMES[midi_number % 12]
    return f"{note}{octave}"
