"""Grading scale lookups."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.core.exceptions import NotFoundError
from report_engine.models.grading_scale import GradingScale
from report_engine.schemas.grading import GradingScaleResponse


class GradingScaleService:
    """Grading scale read service."""

    def __init__(self, db: Session):
        self.db = db

    def get_grading_scale(self, scale_id: int, school_id: int) -> GradingScale:
        """Get grading scale by ID. A missing scale is never replaced by a default."""
        result = self.db.execute(
            select(GradingScale).where(
                GradingScale.id == scale_id,
                GradingScale.school_id == school_id,
            )
        )
        scale = result.scalar_one_or_none()
        if not scale:
            raise NotFoundError("Grading scale", str(scale_id))
        return scale

    def get_scale_response(self, scale_id: int, school_id: int) -> GradingScaleResponse:
        return GradingScaleResponse.model_validate(self.get_grading_scale(scale_id, school_id))
