"""Exam marks entry and profile endpoints."""

import dataclasses
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from report_engine.core.config import settings
from report_engine.core.database import get_db
from report_engine.core.dependencies import ActiveSchoolContext, SchoolContext
from report_engine.grading.policy import CompletenessPolicy
from report_engine.models.audit import AuditAction
from report_engine.schemas.exam import (
    ExamResponse,
    MarksEntryRequest,
    MarksEntryResult,
    StudentExamProfileResponse,
)
from report_engine.services.audit import AuditService
from report_engine.services.exam import ExamService

router = APIRouter()


@router.get("/{exam_id}", response_model=ExamResponse)
def get_exam(
    exam_id: int,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get an exam with the subjects it offers.
    """
    service = ExamService(db)
    return service.get_exam(context.school_id, exam_id)


@router.post("/{exam_id}/marks", response_model=MarksEntryResult)
def record_marks(
    exam_id: int,
    request: MarksEntryRequest,
    context: ActiveSchoolContext,
    db: Annotated[Session, Depends(get_db)],
    http_request: Request,
):
    """
    Record paper marks for one or more students and re-grade their profiles.
    Scores must lie between 0 and the subject's max score; a single bad mark
    rejects the whole request.
    """
    policy = dataclasses.replace(settings.engine_policy, completeness=CompletenessPolicy.LENIENT)
    service = ExamService(db, policy)
    result = service.record_marks(context.school_id, exam_id, request)

    # Audit log
    audit = AuditService(db)
    audit.log(
        action=AuditAction.MARKS_RECORDED,
        resource_type="exam",
        resource_id=str(exam_id),
        school_id=context.school_id,
        description=f"Marks recorded for {len(result.profiles)} students",
        extra_data={"student_ids": [p.student_id for p in result.profiles]},
        ip_address=http_request.client.host if http_request.client else None,
    )

    return result


@router.get("/{exam_id}/profiles/{student_id}", response_model=StudentExamProfileResponse)
def get_student_profile(
    exam_id: int,
    student_id: int,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a student's graded profile for an exam.
    """
    service = ExamService(db)
    return service.get_profile_response(context.school_id, exam_id, student_id)
