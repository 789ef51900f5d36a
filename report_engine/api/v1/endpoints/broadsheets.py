"""Class broadsheet endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from report_engine.core.config import settings
from report_engine.core.database import get_db
from report_engine.core.dependencies import SchoolContext
from report_engine.schemas.broadsheet import BroadsheetResponse
from report_engine.services.broadsheet import BroadsheetService

router = APIRouter()


@router.get("", response_model=BroadsheetResponse)
def get_broadsheet(
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
    exam_id: int = Query(...),
    class_name: str = Query(..., min_length=1),
    section: str | None = None,
):
    """
    Ranked marks of every active student in a class for one exam.
    """
    service = BroadsheetService(db, settings.engine_policy)
    return service.build(context.school_id, exam_id, class_name, section)
