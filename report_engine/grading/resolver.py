"""Final score to grade band lookup."""

from collections.abc import Sequence

from report_engine.grading.policy import BandBoundaryMode
from report_engine.grading.types import GradeBand


class GradeResolver:
    """Finds the grade band for a score, in scale order."""

    def __init__(self, boundary_mode: BandBoundaryMode = BandBoundaryMode.INCLUSIVE):
        self.boundary_mode = boundary_mode

    def resolve(self, score: float, bands: Sequence[GradeBand]) -> GradeBand | None:
        """Return the first matching band, or None when the score is ungraded."""
        if not bands:
            return None

        if self.boundary_mode is BandBoundaryMode.HALF_OPEN:
            top = max(bands, key=lambda b: b.upper_bound)
            for band in bands:
                if band.lower_bound <= score < band.upper_bound:
                    return band
                if band is top and score == band.upper_bound:
                    return band
            return None

        for band in bands:
            if band.lower_bound <= score <= band.upper_bound:
                return band
        return None
