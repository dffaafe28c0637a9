"""Tests for melodyguide/pitch.py."""
from __future__ import annotations

import math

import pytest
from melodyguide.pitch import (
    InvalidFrequencyError, correct_octave, frequency_to_pitch, pitch_to_frequency,
    pitch_to_note_name,
)


class TestFrequencyToPitch:
    def test_a4_is_69(self):
        assert frequency_to_pitch(440.0) == pytest.approx(69.0)

    def test_a3(self):
        assert frequency_to_pitch(220.0) == pytest.approx(57.0)

    def test_middle_c(self):
        assert frequency_to_pitch(261.63) == pytest.approx(60.0, abs=0.01)

    def test_fractional(self):
        # A quarter tone above A4
        assert frequency_to_pitch(440.0 * 2 ** (0.5 / 12)) == pytest.approx(69.5)

    def test_zero_raises(self):
        with pytest.raises(InvalidFrequencyError):
            frequency_to_pitch(0.0)

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            frequency_to_pitch(-100.0)

    def test_nan_raises(self):
        with pytest.raises(InvalidFrequencyError):
            frequency_to_pitch(math.nan)

    def test_infinite_raises(self):
        with pytest.raises(InvalidFrequencyError):
            frequency_to_pitch(math.inf)


class TestPitchToFrequency:
    def test_69_is_440(self):
        assert pitch_to_frequency(69) == pytest.approx(440.0)

    def test_octave_doubles(self):
        assert pitch_to_frequency(81) == pytest.approx(880.0)

    @pytest.mark.parametrize("hz", [0.5, 27.5, 82.41, 220.0, 440.0, 1046.5, 3000.0, 19_999.0])
    def test_round_trip(self, hz):
        assert pitch_to_frequency(frequency_to_pitch(hz)) == pytest.approx(hz, rel=1e-6)


class TestCorrectOctave:
    def test_at_floor_unchanged(self):
        assert correct_octave(60.0) == (60.0, False)

    def test_above_floor_unchanged(self):
        assert correct_octave(69.0) == (69.0, False)

    def test_one_octave_below(self):
        # A3 (57) is lifted once to A4 (69)
        assert correct_octave(57.0) == (69.0, True)

    def test_just_below_floor(self):
        assert correct_octave(59.5) == (71.5, True)

    def test_two_octaves_below(self):
        # 33 -> 45 is still more than an octave under 60, so lift again
        assert correct_octave(33.0) == (57.0, True)

    def test_exactly_one_octave_below_after_first_lift(self):
        # 36 -> 48 is not *more* than an octave below 60
        assert correct_octave(36.0) == (48.0, True)

    def test_capped_at_two_corrections(self):
        pitch, corrected = correct_octave(20.0)
        assert pitch == 44.0
        assert corrected
        assert pitch < 60

    def test_custom_floor(self):
        assert correct_octave(50.0, floor=48) == (50.0, False)
        assert correct_octave(47.0, floor=48) == (59.0, True)


class TestPitchToNoteName:
    def test_middle_c(self):
        assert pitch_to_note_name(60) == "C4"

    def test_a4(self):
        assert pitch_to_note_name(69) == "A4"

    def test_c_sharp_4(self):
        assert pitch_to_note_name(61) == "C#4"

    def test_rounds_to_nearest(self):
        assert pitch_to_note_name(69.3) == "A4"
        assert pitch_to_note_name(68.7) == "A4"

    def test_midi_0(self):
        assert pitch_to_note_name(0) == "C-1"
