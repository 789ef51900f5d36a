"""Exam and marks entry schemas."""

from decimal import Decimal

from pydantic import Field

from report_engine.schemas.common import BaseSchema
from report_engine.schemas.report import DivisionSchema


# ==========================================
# Exam Schemas
# ==========================================

class ExamSubjectResponse(BaseSchema):
    """Exam subject response schema."""

    id: int
    exam_id: int
    subject_id: str
    subject_name: str
    max_score: Decimal
    is_core_subject: bool


class ExamResponse(BaseSchema):
    """Exam response schema."""

    id: int
    school_id: int
    name: str
    term: str
    academic_year: str
    default_grading_scale_id: int
    subjects: list[ExamSubjectResponse]


# ==========================================
# Marks Entry
# ==========================================

class PaperMark(BaseSchema):
    """A mark for one exam subject; None clears it."""

    exam_subject_id: int
    score: Decimal | None = None


class StudentMarksInput(BaseSchema):
    """All marks entered for one student."""

    student_id: int
    marks: list[PaperMark]


class MarksEntryRequest(BaseSchema):
    """Marks entry for an exam, one or more students."""

    students: list[StudentMarksInput] = Field(..., min_length=1)


class PaperScoreResponse(BaseSchema):
    """Stored paper score with its grade."""

    exam_subject_id: int
    score: Decimal | None
    grade: str | None
    grade_value: int | None


class StudentExamProfileResponse(BaseSchema):
    """Student exam profile response schema."""

    id: int
    exam_id: int
    student_id: int
    aggregate: int | None
    division: DivisionSchema
    scores: list[PaperScoreResponse]


class MarksEntryResult(BaseSchema):
    """Result of a marks entry request."""

    exam_id: int
    profiles: list[StudentExamProfileResponse]
    message: str
