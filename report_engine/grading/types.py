"""Value types passed between the grading components.

Subject outcomes and divisions are small tagged unions rather than
nullable strings, so that "no score", "ungraded" and "excluded from
ranking" stay distinguishable all the way into the published report.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass(frozen=True)
class GradeBand:
    """A score range mapped to a grade name and its point value."""

    name: str
    lower_bound: float
    upper_bound: float
    value: int
    comment: str | None = None


@dataclass(frozen=True)
class DivisionBand:
    """An aggregate range mapped to a division name."""

    name: str
    min_aggregate: int
    max_aggregate: int


@dataclass(frozen=True)
class Scale:
    """Grading scale as seen by the engine: ordered grade and division bands."""

    fail_value: int
    grades: tuple[GradeBand, ...] = ()
    divisions: tuple[DivisionBand, ...] = ()
    scale_id: int | None = None


@dataclass(frozen=True)
class SubjectSpec:
    """A subject taking part in a report, with its core flag from the defining source."""

    subject_id: str
    subject_name: str
    is_core: bool = False


@dataclass(frozen=True)
class SourceMark:
    """One exam source's raw mark for a subject.

    ``max_score`` is None when the source exam does not offer the subject;
    ``raw_score`` is None when no mark was recorded.
    """

    weight: float
    max_score: float | None
    raw_score: Any = None


# ==========================================
# Subject outcomes
# ==========================================


@dataclass(frozen=True)
class Present:
    """A subject with a final score; grade and value are None when no band matched."""

    final_score: int
    grade: str | None = None
    value: int | None = None

    @property
    def is_graded(self) -> bool:
        return self.grade is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "final_score": self.final_score,
            "grade": self.grade,
            "value": self.value,
        }


@dataclass(frozen=True)
class Absent:
    """A subject no source contributed a score to."""


SubjectOutcome = Present | Absent


# ==========================================
# Divisions
# ==========================================


class DivisionKind(str, enum.Enum):
    CLASSIFIED = "classified"
    UNGRADED = "ungraded"
    EXCLUDED = "excluded"


UNGRADED_LABEL = "Ungraded"


@dataclass(frozen=True)
class Classified:
    name: str

    kind: ClassVar[DivisionKind] = DivisionKind.CLASSIFIED

    @property
    def label(self) -> str | None:
        return self.name


@dataclass(frozen=True)
class Ungraded:
    name: str = UNGRADED_LABEL

    kind: ClassVar[DivisionKind] = DivisionKind.UNGRADED

    @property
    def label(self) -> str | None:
        return self.name


@dataclass(frozen=True)
class Excluded:
    kind: ClassVar[DivisionKind] = DivisionKind.EXCLUDED

    @property
    def label(self) -> str | None:
        return None


Division = Classified | Ungraded | Excluded


def division_to_dict(division: Division) -> dict[str, Any]:
    """Serialize a division with its tag, e.g. for JSON report storage."""
    return {"kind": division.kind.value, "name": division.label}


def division_from_dict(data: dict[str, Any] | None) -> Division:
    if not data:
        return Excluded()
    kind = DivisionKind(data.get("kind", DivisionKind.EXCLUDED.value))
    if kind is DivisionKind.CLASSIFIED:
        return Classified(data["name"])
    if kind is DivisionKind.UNGRADED:
        return Ungraded(data.get("name") or UNGRADED_LABEL)
    return Excluded()


# ==========================================
# Aggregate and ranking results
# ==========================================


@dataclass(frozen=True)
class AggregateResult:
    aggregate: int | None
    has_failed: bool = False
    missed_core_paper: bool = False
    resolved_core: int = 0
    core_total: int = 0


@dataclass(frozen=True)
class StudentResult:
    """Everything the engine derives for one student."""

    outcomes: dict[str, SubjectOutcome] = field(default_factory=dict)
    aggregate: AggregateResult = field(default_factory=lambda: AggregateResult(aggregate=None))
    division: Division = field(default_factory=Excluded)
    total_marks: int = 0

    def scores_dict(self) -> dict[str, dict[str, Any]]:
        """Present subjects only; absent subjects never appear with a zero."""
        return {
            subject_id: outcome.to_dict()
            for subject_id, outcome in self.outcomes.items()
            if isinstance(outcome, Present)
        }


UNRANKED = "X"


@dataclass(frozen=True)
class RankedEntry:
    key: Any
    aggregate: int | None
    division: Division
    rank: int | None = None

    @property
    def position(self) -> int | str:
        return self.rank if self.rank is not None else UNRANKED
