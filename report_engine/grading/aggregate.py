"""Core-subject aggregate with completeness tracking."""

from collections.abc import Iterable

from report_engine.grading.policy import CompletenessPolicy
from report_engine.grading.types import AggregateResult


class AggregateCalculator:
    """Sums the grade values of core subjects. Lower is better."""

    def __init__(self, completeness: CompletenessPolicy = CompletenessPolicy.STRICT):
        self.completeness = completeness

    def calculate(self, core_values: Iterable[int | None], fail_value: int) -> AggregateResult:
        """Aggregate one student's core grades.

        ``core_values`` holds one entry per core subject of the exam or
        report: the resolved grade value, or None when the subject has no
        score or its score matched no grade band.
        """
        aggregate = 0
        has_failed = False
        resolved = 0
        total = 0

        for value in core_values:
            total += 1
            if value is None:
                continue
            resolved += 1
            aggregate += value
            if value >= fail_value:
                has_failed = True

        missed_core_paper = False
        if self.completeness is CompletenessPolicy.STRICT and resolved < total:
            missed_core_paper = True

        return AggregateResult(
            aggregate=None if missed_core_paper else aggregate,
            has_failed=has_failed,
            missed_core_paper=missed_core_paper,
            resolved_core=resolved,
            core_total=total,
        )
