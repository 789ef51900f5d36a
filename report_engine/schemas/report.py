"""Report configuration, publication and published report schemas."""

import enum
from datetime import datetime
from decimal import Decimal

from pydantic import Field

from report_engine.grading.types import Division, DivisionKind
from report_engine.schemas.common import BaseSchema


# ==========================================
# Report Configuration
# ==========================================

class ReportSourceSchema(BaseSchema):
    """One contributing exam and its weight."""

    exam_id: int
    weight: Decimal = Field(..., ge=0, le=100)


class ReportConfigurationResponse(BaseSchema):
    """Report configuration response schema."""

    id: int
    school_id: int
    name: str
    term: str
    academic_year: str
    grading_scale_id: int
    sources: list[ReportSourceSchema]


# ==========================================
# Published Reports
# ==========================================

class DivisionSchema(BaseSchema):
    """Tagged division: classified into a band, ungraded, or excluded from ranking."""

    kind: DivisionKind
    name: str | None = None

    @classmethod
    def from_division(cls, division: Division) -> "DivisionSchema":
        return cls(kind=division.kind, name=division.label)


class SubjectScoreSchema(BaseSchema):
    """Final score of one reported subject."""

    final_score: int
    grade: str | None = None
    value: int | None = None


class PublishedReportResponse(BaseSchema):
    """Published report response schema."""

    school_id: int
    student_id: int | None
    student_name: str
    student_reg_no: str
    config_id: int
    config_name: str
    scores: dict[str, SubjectScoreSchema]
    aggregate: int | None
    division: DivisionSchema
    position: int | None
    total_marks: int
    published_at: datetime


# ==========================================
# Publication
# ==========================================

class StudentFilter(BaseSchema):
    """Narrows the students a publication run covers."""

    class_name: str | None = None
    section: str | None = None


class PublishRequest(BaseSchema):
    """Request body for publishing a report configuration."""

    class_name: str | None = None
    section: str | None = None
    notify: bool = True


class DeliveryStatus(str, enum.Enum):
    """Per-recipient notification outcome."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class NotificationOutcome(BaseSchema):
    """Result of notifying one student's guardian."""

    student_id: int
    recipient: str | None
    status: DeliveryStatus
    error: str | None = None


class PublishSummary(BaseSchema):
    """Outcome of one publication run."""

    config_id: int
    reports_generated: int
    notifications_sent: int
    notifications_failed: int = 0
    outcomes: list[NotificationOutcome] = []
    errors: list[str] = []
    message: str
