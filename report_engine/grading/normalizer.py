"""Raw mark to weighted percentage contribution."""

import logging
import math
from decimal import Decimal

from report_engine.grading.policy import ScoreRangePolicy

logger = logging.getLogger(__name__)


def as_number(value) -> float | None:
    """Coerce a stored mark to float; None for missing or malformed values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ScoreNormalizer:
    """Turns one raw mark into its weighted share of a 100-point score."""

    def __init__(self, score_range: ScoreRangePolicy = ScoreRangePolicy.TOLERATE):
        self.score_range = score_range

    def normalize(self, raw_score, max_score) -> float | None:
        """Percentage of max_score, or None when there is nothing to count."""
        score = as_number(raw_score)
        maximum = as_number(max_score)
        if score is None or maximum is None or maximum <= 0:
            return None

        if score < 0 or score > maximum:
            if self.score_range is ScoreRangePolicy.REJECT:
                logger.warning(
                    f"[SCORES] Rejected out-of-range mark {score} (max {maximum})"
                )
                return None
            logger.debug(f"[SCORES] Tolerating out-of-range mark {score} (max {maximum})")

        return (score / maximum) * 100

    def contribution(self, raw_score, max_score, weight: float) -> float | None:
        normalized = self.normalize(raw_score, max_score)
        if normalized is None:
            return None
        return normalized * (weight / 100)
