"""Competition ranking of students by aggregate."""

from collections.abc import Iterable
from typing import Any

from report_engine.grading.types import DivisionKind, Division, RankedEntry

RANKABLE_KINDS = {DivisionKind.CLASSIFIED, DivisionKind.UNGRADED}


class RankEngine:
    """Ranks students by ascending aggregate (lower aggregate ranks higher).

    Ties share a rank and the next distinct aggregate takes its position
    in the full sorted order, so aggregates ``[10, 10, 15, 20]`` rank as
    ``1, 1, 3, 4``. Students without an aggregate, or excluded from
    classification, get no numeric rank and are listed last.
    """

    def is_eligible(self, aggregate: int | None, division: Division) -> bool:
        return aggregate is not None and division.kind in RANKABLE_KINDS

    def rank(self, entries: Iterable[tuple[Any, int | None, Division]]) -> list[RankedEntry]:
        eligible: list[tuple[Any, int, Division]] = []
        unranked: list[tuple[Any, int | None, Division]] = []
        for key, aggregate, division in entries:
            if self.is_eligible(aggregate, division):
                eligible.append((key, aggregate, division))
            else:
                unranked.append((key, aggregate, division))

        eligible.sort(key=lambda entry: entry[1])

        ranked: list[RankedEntry] = []
        last_aggregate: int | None = None
        last_rank = 0
        for index, (key, aggregate, division) in enumerate(eligible):
            if aggregate != last_aggregate:
                last_rank = index + 1
                last_aggregate = aggregate
            ranked.append(RankedEntry(key=key, aggregate=aggregate, division=division, rank=last_rank))

        unranked.sort(key=lambda entry: (entry[1] is None, entry[1] or 0))
        ranked.extend(
            RankedEntry(key=key, aggregate=aggregate, division=division)
            for key, aggregate, division in unranked
        )
        return ranked
