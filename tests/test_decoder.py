"""Tests for turning detections into an ordered solution."""

import itertools

import pytest

from fakes import det
from models.errors import DecodeError, LengthMismatch
from solvers.decoder import decode


class TestLengthCheck:
    """Under- and over-segmented images are rejected outright."""

    @pytest.mark.parametrize("count", [0, 1, 2, 4, 9])
    def test_wrong_count_raises_length_mismatch(self, count):
        detections = [det(10 * i, "X") for i in range(count)]
        with pytest.raises(LengthMismatch) as exc_info:
            decode(detections, 0.5, 3)
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == count

    def test_length_mismatch_is_a_decode_error(self):
        with pytest.raises(DecodeError):
            decode([], 0.5, 8)

    def test_message_reports_both_lengths(self):
        with pytest.raises(LengthMismatch, match="Expected: 8, Got: 2"):
            decode([det(1, "a"), det(2, "b")], 0.5, 8)

    def test_empty_set_with_zero_length(self):
        assert decode([], 0.5, 0) == ""

    def test_low_confidence_detections_do_not_count(self):
        detections = [det(10, "A"), det(20, "B"), det(30, "C", confidence=0.4)]
        with pytest.raises(LengthMismatch) as exc_info:
            decode(detections, 0.8, 3)
        assert exc_info.value.actual == 2


class TestOrdering:
    """Labels are read left to right."""

    def test_sorted_by_left_edge(self):
        detections = [det(30, "7"), det(10, "A"), det(20, "3")]
        assert decode(detections, 0.8, 3) == "A37"

    def test_permutation_invariant(self):
        detections = [det(42.5, "x"), det(3.0, "k"), det(17.25, "9"), det(88.0, "Q")]
        outputs = {decode(list(p), 0.5, 4) for p in itertools.permutations(detections)}
        assert outputs == {"k9xQ"}

    def test_output_length_matches_expected(self):
        detections = [det(x, "ab"[x % 2]) for x in range(8)]
        solution = decode(detections, 0.5, 8)
        assert len(solution) == 8

    def test_equal_x_keeps_input_order(self):
        detections = [det(10, "B"), det(10, "A"), det(5, "C")]
        assert decode(detections, 0.5, 3) == "CBA"

    def test_accepts_any_iterable(self):
        detections = (d for d in [det(2, "b"), det(1, "a")])
        assert decode(detections, 0.5, 2) == "ab"


class TestConfidenceFilter:
    """Filtering on class confidence."""

    def test_threshold_is_inclusive(self):
        detections = [det(1, "a", 0.8), det(2, "b", 0.8)]
        assert decode(detections, 0.8, 2) == "ab"

    def test_discarded_detection_is_not_a_fallback(self):
        detections = [det(1, "a", 0.9), det(2, "b", 0.79), det(3, "c", 0.95)]
        assert decode(detections, 0.8, 2) == "ac"

    def test_filter_is_monotonic(self):
        confidences = [0.1, 0.35, 0.5, 0.62, 0.8, 0.91, 1.0]
        detections = [det(i, str(i), c) for i, c in enumerate(confidences)]
        thresholds = [0.0, 0.2, 0.5, 0.62, 0.85, 1.0]

        kept = []
        for threshold in thresholds:
            count = sum(1 for d in detections if d.confidence >= threshold)
            kept.append(set(decode(detections, threshold, count)))

        for looser, stricter in zip(kept, kept[1:]):
            assert stricter <= looser

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ValueError):
            decode([], threshold, 0)
