import unittest

import numpy as np
import pytest

from melody_echo.note_utils import (
    NOTE_NAMES,
    REFERENCE_FREQUENCY,
    classify,
    frequency_to_note,
    note_to_frequency,
    round_half_away_from_zero,
    split_note,
    to_display_label,
)


def expected_label(semitone_index):
    return NOTE_NAMES[semitone_index % 12].replace("#", "") + str(semitone_index // 12)


class TestFrequencyToNote(unittest.TestCase):
    def test_middle_c(self):
        self.assertEqual(frequency_to_note(261.6), "C4")

    def test_a4(self):
        self.assertEqual(frequency_to_note(440.0), "A4")

    def test_reference_is_c0(self):
        self.assertEqual(frequency_to_note(REFERENCE_FREQUENCY), "C0")

    def test_octave_transitions(self):
        self.assertEqual(frequency_to_note(246.94), "B3")
        self.assertEqual(frequency_to_note(261.63), "C4")

    def test_high_c(self):
        self.assertEqual(frequency_to_note(2093.0), "C7")

    def test_scenario_frequencies(self):
        self.assertEqual(frequency_to_note(293.7), "D4")
        self.assertEqual(frequency_to_note(200.0), "G3")
        self.assertEqual(frequency_to_note(329.6), "E4")

    def test_sharps_collapse_to_natural_below(self):
        self.assertEqual(frequency_to_note(277.18), "C4")  # C#4
        self.assertEqual(frequency_to_note(311.13), "D4")  # D#4
        self.assertEqual(frequency_to_note(466.16), "A4")  # A#4

    def test_naturals_are_never_altered(self):
        # E and B have no sharp above them to collapse into
        self.assertEqual(frequency_to_note(329.63), "E4")
        self.assertEqual(frequency_to_note(349.23), "F4")
        self.assertEqual(frequency_to_note(493.88), "B4")

    def test_below_noise_floor(self):
        self.assertIsNone(frequency_to_note(0.5))
        self.assertIsNone(frequency_to_note(9.99))
        self.assertIsNone(frequency_to_note(0.0))
        self.assertIsNone(frequency_to_note(-440.0))

    def test_noise_floor_is_inclusive(self):
        self.assertIsNotNone(frequency_to_note(10.0))

    def test_no_reading(self):
        self.assertIsNone(frequency_to_note(None))
        self.assertIsNone(frequency_to_note(float("nan")))

    def test_classify_alias(self):
        self.assertIs(classify, frequency_to_note)


@pytest.mark.parametrize("semitone_index", range(0, 108))
@pytest.mark.parametrize("offset", [-0.49, 0.0, 0.49])
def test_semitone_windows(semitone_index, offset):
    frequency = REFERENCE_FREQUENCY * 2 ** ((semitone_index + offset) / 12)
    assert frequency_to_note(frequency) == expected_label(semitone_index)


@pytest.mark.parametrize("semitone_index", range(0, 108))
def test_half_semitone_boundary_rounds_up(semitone_index):
    # The lower edge of each window belongs to the note above
    frequency = REFERENCE_FREQUENCY * 2 ** ((semitone_index + 0.5) / 12)
    assert frequency_to_note(frequency) == expected_label(semitone_index + 1)


def test_labels_never_contain_sharps():
    for frequency in np.geomspace(10.5, 8000.0, 2000):
        label = frequency_to_note(float(frequency))
        assert label is not None
        assert "#" not in label


class TestRounding(unittest.TestCase):
    def test_ties_round_away_from_zero(self):
        self.assertEqual(round_half_away_from_zero(0.5), 1)
        self.assertEqual(round_half_away_from_zero(2.5), 3)
        self.assertEqual(round_half_away_from_zero(-2.5), -3)

    def test_non_ties(self):
        self.assertEqual(round_half_away_from_zero(2.49), 2)
        self.assertEqual(round_half_away_from_zero(2.51), 3)
        self.assertEqual(round_half_away_from_zero(-0.2), 0)
        self.assertEqual(round_half_away_from_zero(0.0), 0)


class TestNoteLabels(unittest.TestCase):
    def test_display_label(self):
        self.assertEqual(to_display_label("C/4"), "C4")
        self.assertEqual(to_display_label("F#/5"), "F#5")
        self.assertEqual(to_display_label("G3"), "G3")

    def test_split_note(self):
        self.assertEqual(split_note("C/4"), ("C", 4))
        self.assertEqual(split_note("f#3"), ("F#", 3))
        self.assertEqual(split_note("B-1"), ("B", -1))

    def test_split_note_rejects_garbage(self):
        for bad in ("", "H4", "C", "Cb4", "4"):
            with self.assertRaises(ValueError):
                split_note(bad)

    def test_note_to_frequency(self):
        self.assertAlmostEqual(note_to_frequency("A/4"), 440.0)
        self.assertAlmostEqual(note_to_frequency("C4"), 261.63, places=2)
        self.assertAlmostEqual(note_to_frequency("A5"), 880.0)

    def test_synthesized_pitch_classifies_back(self):
        for note in ("C/4", "D/4", "E/4", "F/4", "G/4", "A/4", "B/4"):
            self.assertEqual(frequency_to_note(note_to_frequency(note)), to_display_label(note))


if __name__ == "__main__":
    unittest.main()
