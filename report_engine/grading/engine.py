"""Grading pipeline shared by report publication, broadsheets and marks entry."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from report_engine.grading.aggregate import AggregateCalculator
from report_engine.grading.aggregator import SubjectScoreAggregator
from report_engine.grading.division import DivisionClassifier
from report_engine.grading.normalizer import ScoreNormalizer
from report_engine.grading.policy import EnginePolicy
from report_engine.grading.ranking import RankEngine
from report_engine.grading.resolver import GradeResolver
from report_engine.grading.types import (
    Absent,
    Present,
    RankedEntry,
    Scale,
    SourceMark,
    StudentResult,
    SubjectOutcome,
    SubjectSpec,
)


class GradingEngine:
    """Runs raw marks through normalization, grading, aggregation and classification.

    The engine is pure: it holds only its policy and reads nothing from
    the database or settings. Callers load the scale and marks and pass
    them in.
    """

    def __init__(self, policy: EnginePolicy | None = None):
        self.policy = policy or EnginePolicy()
        self.normalizer = ScoreNormalizer(self.policy.score_range)
        self.aggregator = SubjectScoreAggregator(self.normalizer)
        self.resolver = GradeResolver(self.policy.boundary_mode)
        self.calculator = AggregateCalculator(self.policy.completeness)
        self.classifier = DivisionClassifier()
        self.ranker = RankEngine()

    def grade_subject(self, marks: Iterable[SourceMark], scale: Scale) -> SubjectOutcome:
        final_score = self.aggregator.final_score(marks)
        if final_score is None:
            return Absent()
        band = self.resolver.resolve(final_score, scale.grades)
        if band is None:
            return Present(final_score=final_score)
        return Present(final_score=final_score, grade=band.name, value=band.value)

    def evaluate(
        self,
        subjects: Sequence[SubjectSpec],
        marks: Mapping[str, Sequence[SourceMark]],
        scale: Scale,
    ) -> StudentResult:
        """Grade every subject for one student and derive aggregate and division."""
        outcomes: dict[str, SubjectOutcome] = {}
        core_values: list[int | None] = []

        for subject in subjects:
            outcome = self.grade_subject(marks.get(subject.subject_id, ()), scale)
            outcomes[subject.subject_id] = outcome
            if subject.is_core:
                core_values.append(outcome.value if isinstance(outcome, Present) else None)

        aggregate = self.calculator.calculate(core_values, scale.fail_value)
        division = self.classifier.classify(aggregate, scale.divisions)
        total_marks = sum(
            outcome.final_score for outcome in outcomes.values() if isinstance(outcome, Present)
        )

        return StudentResult(
            outcomes=outcomes,
            aggregate=aggregate,
            division=division,
            total_marks=total_marks,
        )

    def rank(self, results: Mapping[Any, StudentResult]) -> list[RankedEntry]:
        """Rank a cohort; keys are whatever identifies a student to the caller."""
        return self.ranker.rank(
            (key, result.aggregate.aggregate, result.division)
            for key, result in results.items()
        )
