"""Unit tests for core aggregates and division classification."""

import pytest

from report_engine.grading.aggregate import AggregateCalculator
from report_engine.grading.division import DivisionClassifier
from report_engine.grading.policy import CompletenessPolicy
from report_engine.grading.types import (
    AggregateResult,
    Classified,
    DivisionBand,
    Excluded,
    Ungraded,
    division_from_dict,
    division_to_dict,
)


class TestAggregateCalculator:
    """Tests for summing core grade values."""

    def test_sums_core_values(self):
        result = AggregateCalculator().calculate([1, 2, 3, 4], fail_value=9)
        assert result.aggregate == 10
        assert not result.has_failed
        assert not result.missed_core_paper
        assert (result.resolved_core, result.core_total) == (4, 4)

    def test_strict_missing_core_voids_aggregate(self):
        result = AggregateCalculator(CompletenessPolicy.STRICT).calculate([1, None, 3], fail_value=9)
        assert result.aggregate is None
        assert result.missed_core_paper
        assert result.resolved_core == 2

    def test_lenient_missing_core_is_skipped(self):
        result = AggregateCalculator(CompletenessPolicy.LENIENT).calculate([1, None, 3], fail_value=9)
        assert result.aggregate == 4
        assert not result.missed_core_paper

    def test_fail_value_marks_failure(self):
        result = AggregateCalculator().calculate([1, 9, 2, 3], fail_value=9)
        assert result.has_failed
        assert result.aggregate == 15

    def test_no_core_subjects(self):
        result = AggregateCalculator().calculate([], fail_value=9)
        assert result.aggregate == 0
        assert result.resolved_core == 0


class TestDivisionClassifier:
    """Tests for the classified / ungraded / excluded outcome."""

    @pytest.fixture
    def classifier(self) -> DivisionClassifier:
        return DivisionClassifier()

    def result(self, aggregate, **kwargs) -> AggregateResult:
        kwargs.setdefault("resolved_core", 4)
        kwargs.setdefault("core_total", 4)
        return AggregateResult(aggregate=aggregate, **kwargs)

    @pytest.mark.parametrize(
        "aggregate, division",
        [
            (4, "Division 1"),
            (12, "Division 1"),
            (13, "Division 2"),
            (23, "Division 2"),
            (24, "Division 3"),
            (34, "Division 4"),
        ],
    )
    def test_band_bounds_are_inclusive(self, classifier, scale, aggregate, division):
        assert classifier.classify(self.result(aggregate), scale.divisions) == Classified(division)

    def test_failure_short_circuits_good_aggregate(self, classifier, scale):
        division = classifier.classify(self.result(10, has_failed=True), scale.divisions)
        assert division == Ungraded("Ungraded")

    def test_missed_core_paper_is_ungraded(self, classifier, scale):
        result = self.result(None, missed_core_paper=True, resolved_core=3)
        assert isinstance(classifier.classify(result, scale.divisions), Ungraded)

    def test_ungraded_band_name_is_taken_from_scale(self, classifier):
        divisions = [DivisionBand("Division 1", 4, 12), DivisionBand("U - ungraded", 13, 36)]
        division = classifier.classify(self.result(5, has_failed=True), divisions)
        assert division == Ungraded("U - ungraded")

    def test_aggregate_matching_no_band_is_ungraded(self, classifier, scale):
        assert classifier.classify(self.result(40), scale.divisions) == Ungraded()

    def test_aggregate_in_ungraded_band(self, classifier, scale):
        division = classifier.classify(self.result(35), scale.divisions)
        assert isinstance(division, Ungraded)
        assert division.name == "Ungraded"

    def test_no_resolved_core_is_excluded(self, classifier, scale):
        result = self.result(None, missed_core_paper=True, resolved_core=0)
        assert classifier.classify(result, scale.divisions) == Excluded()

    def test_excluded_differs_from_ungraded(self, classifier, scale):
        excluded = classifier.classify(self.result(0, resolved_core=0), scale.divisions)
        ungraded = classifier.classify(self.result(40), scale.divisions)
        assert excluded.label is None
        assert ungraded.label == "Ungraded"
        assert excluded.kind != ungraded.kind


class TestDivisionSerialization:
    @pytest.mark.parametrize(
        "division",
        [Classified("Division 2"), Ungraded("Ungraded"), Excluded()],
    )
    def test_tag_survives_storage(self, division):
        assert division_from_dict(division_to_dict(division)) == division

    def test_missing_division_reads_as_excluded(self):
        assert division_from_dict(None) == Excluded()
