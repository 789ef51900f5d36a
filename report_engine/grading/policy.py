"""Named policies that select between the grading behaviours schools use."""

import enum
from dataclasses import dataclass


class CompletenessPolicy(str, enum.Enum):
    """How missing core-subject grades affect the aggregate."""

    # Missing core grades are skipped; the aggregate is always a number
    LENIENT = "lenient"
    # Any missing core grade voids the aggregate and drops the student from ranking
    STRICT = "strict"


class ScoreRangePolicy(str, enum.Enum):
    """What to do with raw marks outside 0..max_score."""

    TOLERATE = "tolerate"
    REJECT = "reject"


class BandBoundaryMode(str, enum.Enum):
    """How grade band bounds are compared against a score."""

    # lower <= score <= upper, first band in scale order wins
    INCLUSIVE = "inclusive"
    # lower <= score < upper; the top band is closed at its upper bound
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class EnginePolicy:
    completeness: CompletenessPolicy = CompletenessPolicy.STRICT
    score_range: ScoreRangePolicy = ScoreRangePolicy.TOLERATE
    boundary_mode: BandBoundaryMode = BandBoundaryMode.INCLUSIVE
