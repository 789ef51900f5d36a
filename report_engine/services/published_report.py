"""Published report storage and lookup."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.core.exceptions import NotFoundError
from report_engine.grading.types import division_from_dict
from report_engine.models.report import PublishedReport
from report_engine.schemas.report import DivisionSchema, PublishedReportResponse

# Columns rewritten when a report is republished under an existing key
REPORT_CONTENT_FIELDS = (
    "student_id",
    "student_name",
    "config_name",
    "scores",
    "aggregate",
    "division",
    "position",
    "total_marks",
    "published_at",
)


def report_key(report: PublishedReport) -> tuple[int, str, int]:
    return report.school_id, report.student_reg_no, report.config_id


class PublishedReportService:
    """Write-once-per-key report snapshots."""

    def __init__(self, db: Session):
        self.db = db

    def persist_batch(self, reports: Sequence[PublishedReport]) -> int:
        """Upsert a batch of reports keyed by (school, registration number, configuration).

        Only flushes; the caller owns the transaction so that the batch is
        committed or rolled back as a whole.
        """
        if not reports:
            return 0

        result = self.db.execute(
            select(PublishedReport).where(
                PublishedReport.school_id.in_({r.school_id for r in reports}),
                PublishedReport.config_id.in_({r.config_id for r in reports}),
                PublishedReport.student_reg_no.in_([r.student_reg_no for r in reports]),
            )
        )
        existing = {report_key(r): r for r in result.scalars().all()}

        for report in reports:
            current = existing.get(report_key(report))
            if current is None:
                self.db.add(report)
                existing[report_key(report)] = report
                continue
            for field in REPORT_CONTENT_FIELDS:
                setattr(current, field, getattr(report, field))

        self.db.flush()
        return len(reports)

    def get_report(self, school_id: int, reg_no: str, config_id: int) -> PublishedReport:
        result = self.db.execute(
            select(PublishedReport).where(
                PublishedReport.school_id == school_id,
                PublishedReport.student_reg_no == reg_no,
                PublishedReport.config_id == config_id,
            )
        )
        report = result.scalar_one_or_none()
        if not report:
            raise NotFoundError("Published report", f"{reg_no}_{config_id}")
        return report

    def list_reports(self, school_id: int, config_id: int) -> list[PublishedReport]:
        """Reports of one configuration, best position first."""
        result = self.db.execute(
            select(PublishedReport)
            .where(
                PublishedReport.school_id == school_id,
                PublishedReport.config_id == config_id,
            )
            .order_by(
                PublishedReport.position.is_(None),
                PublishedReport.position,
                PublishedReport.student_name,
            )
        )
        return list(result.scalars().all())

    def to_response(self, report: PublishedReport) -> PublishedReportResponse:
        return PublishedReportResponse(
            school_id=report.school_id,
            student_id=report.student_id,
            student_name=report.student_name,
            student_reg_no=report.student_reg_no,
            config_id=report.config_id,
            config_name=report.config_name,
            scores=report.scores,
            aggregate=report.aggregate,
            division=DivisionSchema.from_division(division_from_dict(report.division)),
            position=report.position,
            total_marks=report.total_marks,
            published_at=report.published_at,
        )
