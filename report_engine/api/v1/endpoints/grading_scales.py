"""Grading scale endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from report_engine.core.database import get_db
from report_engine.core.dependencies import SchoolContext
from report_engine.schemas.grading import GradingScaleResponse
from report_engine.services.grading_scale import GradingScaleService

router = APIRouter()


@router.get("/{scale_id}", response_model=GradingScaleResponse)
def get_grading_scale(
    scale_id: int,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a grading scale with its grade bands and division bands.
    """
    service = GradingScaleService(db)
    return service.get_scale_response(scale_id, context.school_id)
