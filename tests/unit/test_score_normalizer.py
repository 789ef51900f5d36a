"""Unit tests for score normalization and weighted subject scores."""

import math
from decimal import Decimal

import pytest

from report_engine.grading.aggregator import SubjectScoreAggregator
from report_engine.grading.normalizer import ScoreNormalizer, as_number, round_half_up
from report_engine.grading.policy import ScoreRangePolicy
from report_engine.grading.types import SourceMark


class TestAsNumber:
    """Tests for coercing stored marks."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (85, 85.0),
            (72.5, 72.5),
            (Decimal("12.50"), 12.5),
            ("64", 64.0),
            (" 40.5 ", 40.5),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert as_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, math.nan, math.inf, object()])
    def test_missing_or_malformed_values(self, value):
        assert as_number(value) is None


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(44.5) == 45
        assert round_half_up(79.5) == 80
        assert round_half_up(0.5) == 1

    def test_other_values(self):
        assert round_half_up(79.49) == 79
        assert round_half_up(80.0) == 80


class TestScoreNormalizer:
    """Tests for raw mark to percentage."""

    def test_percentage_of_max(self):
        assert ScoreNormalizer().normalize(45, 50) == 90.0

    def test_missing_score(self):
        assert ScoreNormalizer().normalize(None, 100) is None

    def test_non_positive_max_score(self):
        normalizer = ScoreNormalizer()
        assert normalizer.normalize(10, 0) is None
        assert normalizer.normalize(10, -5) is None

    def test_out_of_range_tolerated_by_default(self):
        assert ScoreNormalizer().normalize(120, 100) == 120.0

    def test_out_of_range_rejected(self, caplog):
        normalizer = ScoreNormalizer(ScoreRangePolicy.REJECT)
        assert normalizer.normalize(120, 100) is None
        assert normalizer.normalize(-1, 100) is None
        assert "out-of-range" in caplog.text

    def test_contribution_is_weighted(self):
        assert ScoreNormalizer().contribution(80, 100, 70) == pytest.approx(56.0)


class TestSubjectScoreAggregator:
    """Tests for merging weighted sources into one final score."""

    @pytest.fixture
    def aggregator(self) -> SubjectScoreAggregator:
        return SubjectScoreAggregator()

    def test_all_sources_present(self, aggregator):
        marks = [
            SourceMark(weight=70, max_score=100, raw_score=80),
            SourceMark(weight=30, max_score=100, raw_score=60),
        ]
        assert aggregator.final_score(marks) == 74

    def test_single_source_renormalized_to_its_percentage(self, aggregator):
        marks = [
            SourceMark(weight=70, max_score=100, raw_score=80),
            SourceMark(weight=30, max_score=100, raw_score=None),
        ]
        assert aggregator.final_score(marks) == 80

    def test_source_without_subject_does_not_count_as_zero(self, aggregator):
        marks = [
            SourceMark(weight=60, max_score=100, raw_score=90),
            SourceMark(weight=40, max_score=None),
        ]
        assert aggregator.final_score(marks) == 90

    def test_different_max_scores(self, aggregator):
        marks = [
            SourceMark(weight=50, max_score=50, raw_score=40),
            SourceMark(weight=50, max_score=200, raw_score=100),
        ]
        assert aggregator.final_score(marks) == 65

    def test_no_contributing_source(self, aggregator):
        marks = [
            SourceMark(weight=60, max_score=None),
            SourceMark(weight=40, max_score=100, raw_score=None),
        ]
        assert aggregator.final_score(marks) is None
        assert aggregator.final_score([]) is None

    def test_zero_weight_source_is_ignored(self, aggregator):
        marks = [SourceMark(weight=0, max_score=100, raw_score=90)]
        assert aggregator.final_score(marks) is None

    def test_weights_above_hundred_are_summed(self, aggregator):
        marks = [
            SourceMark(weight=60, max_score=100, raw_score=50),
            SourceMark(weight=60, max_score=100, raw_score=50),
        ]
        assert aggregator.final_score(marks) == 60

    def test_rounds_half_up(self, aggregator):
        marks = [SourceMark(weight=100, max_score=200, raw_score=159)]
        assert aggregator.final_score(marks) == 80

    def test_rejected_mark_falls_back_to_other_sources(self):
        aggregator = SubjectScoreAggregator(ScoreNormalizer(ScoreRangePolicy.REJECT))
        marks = [
            SourceMark(weight=50, max_score=100, raw_score=150),
            SourceMark(weight=50, max_score=100, raw_score=70),
        ]
        assert aggregator.final_score(marks) == 70
