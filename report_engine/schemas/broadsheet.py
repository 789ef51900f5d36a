"""Class broadsheet schemas."""

from decimal import Decimal

from report_engine.schemas.common import BaseSchema
from report_engine.schemas.report import DivisionSchema


class BroadsheetColumn(BaseSchema):
    """One subject column of the broadsheet."""

    exam_subject_id: int
    subject_id: str
    subject_name: str
    max_score: Decimal
    is_core_subject: bool


class BroadsheetCell(BaseSchema):
    """A student's raw mark and resulting grade for one subject."""

    score: Decimal | None = None
    final_score: int | None = None
    grade: str | None = None


class BroadsheetRow(BaseSchema):
    """One student's line on the broadsheet."""

    student_id: int
    student_name: str
    registration_number: str
    scores: dict[str, BroadsheetCell]
    aggregate: int | None
    division: DivisionSchema
    position: int | str


class BroadsheetResponse(BaseSchema):
    """Ranked broadsheet for one class and exam."""

    exam_id: int
    exam_name: str
    class_name: str
    section: str | None
    columns: list[BroadsheetColumn]
    rows: list[BroadsheetRow]
    total_students: int
