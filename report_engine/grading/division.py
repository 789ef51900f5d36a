"""Aggregate to division band."""

from collections.abc import Sequence

from report_engine.grading.types import (
    UNGRADED_LABEL,
    AggregateResult,
    Classified,
    Division,
    DivisionBand,
    Excluded,
    Ungraded,
)


def is_ungraded_band(band: DivisionBand) -> bool:
    return "ungraded" in band.name.lower()


class DivisionClassifier:
    """Places a student in a division, the ungraded bucket, or outside ranking."""

    def ungraded(self, divisions: Sequence[DivisionBand]) -> Ungraded:
        for band in divisions:
            if is_ungraded_band(band):
                return Ungraded(band.name)
        return Ungraded(UNGRADED_LABEL)

    def classify(self, result: AggregateResult, divisions: Sequence[DivisionBand]) -> Division:
        # Nothing to classify: no core grade was resolved at all
        if result.resolved_core == 0:
            return Excluded()

        if result.has_failed or result.missed_core_paper:
            return self.ungraded(divisions)

        if result.aggregate is not None and result.aggregate > 0:
            for band in divisions:
                if band.min_aggregate <= result.aggregate <= band.max_aggregate:
                    if is_ungraded_band(band):
                        return Ungraded(band.name)
                    return Classified(band.name)
            return Ungraded(UNGRADED_LABEL)

        return Excluded()
