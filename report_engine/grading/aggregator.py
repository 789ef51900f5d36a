"""Merge per-source contributions into one final subject score."""

from collections.abc import Iterable

from report_engine.grading.normalizer import ScoreNormalizer, round_half_up
from report_engine.grading.types import SourceMark


class SubjectScoreAggregator:
    """Weighted merge of exam sources for a single subject.

    When some configured sources contributed nothing, the sources that did
    are scaled back up to a full 100% so that one available source
    reproduces its own percentage. A subject with no contributing source
    has no score at all (None), never zero.
    """

    def __init__(self, normalizer: ScoreNormalizer | None = None):
        self.normalizer = normalizer or ScoreNormalizer()

    def final_score(self, marks: Iterable[SourceMark]) -> int | None:
        total_weighted_score = 0.0
        total_weight_used = 0.0

        for mark in marks:
            if mark.max_score is None:
                continue
            contribution = self.normalizer.contribution(mark.raw_score, mark.max_score, mark.weight)
            if contribution is None:
                continue
            total_weighted_score += contribution
            total_weight_used += mark.weight

        if total_weight_used == 0:
            return None

        if total_weight_used < 100:
            final = (total_weighted_score / total_weight_used) * 100
        else:
            final = total_weighted_score
        return round_half_up(final)
