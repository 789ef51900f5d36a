"""Accumulated report publication.

A publication run has two phases with different failure semantics:

1. Compute every student's report, rank each class, and write the whole
   batch in one transaction. Any failure here aborts the run and leaves
   no report from it behind.
2. Notify guardians one at a time. Each send is attempted once; failures
   are collected as outcomes and never abort the run.
"""

import logging
import threading
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from report_engine.core.exceptions import (
    NotificationError,
    PublishCancelledError,
    PublishFailedError,
)
from report_engine.grading.engine import GradingEngine
from report_engine.grading.policy import EnginePolicy
from report_engine.grading.types import SourceMark, StudentResult, SubjectSpec, division_to_dict
from report_engine.models.audit import AuditAction
from report_engine.models.exam import ExamSubject, StudentExamProfile
from report_engine.models.report import PublishedReport, ReportConfiguration
from report_engine.models.student import Student
from report_engine.schemas.report import (
    DeliveryStatus,
    NotificationOutcome,
    PublishSummary,
    StudentFilter,
)
from report_engine.services.audit import AuditService
from report_engine.services.exam import ExamService
from report_engine.services.grading_scale import GradingScaleService
from report_engine.services.notification import SmsGateway, build_result_message
from report_engine.services.published_report import PublishedReportService
from report_engine.services.report_config import ReportConfigService
from report_engine.services.student import StudentService

logger = logging.getLogger(__name__)


def unique_subjects(
    config: ReportConfiguration,
    subjects_by_exam: dict[int, list[ExamSubject]],
) -> list[SubjectSpec]:
    """Subjects across all sources, sorted by name.

    The first source in configuration order that offers a subject defines
    its name and core flag.
    """
    specs: dict[str, SubjectSpec] = {}
    for source in config.sources:
        for subject in subjects_by_exam.get(source.exam_id, []):
            if subject.subject_id in specs:
                continue
            specs[subject.subject_id] = SubjectSpec(
                subject_id=subject.subject_id,
                subject_name=subject.subject_name,
                is_core=subject.is_core_subject,
            )
    return sorted(specs.values(), key=lambda s: (s.subject_name.lower(), s.subject_id))


def source_marks(
    config: ReportConfiguration,
    subjects: Sequence[SubjectSpec],
    subjects_by_exam: dict[int, list[ExamSubject]],
    profiles: dict[int, StudentExamProfile | None],
) -> dict[str, list[SourceMark]]:
    """Collect each source's raw mark for every subject of the report."""
    lookup = {
        (exam_id, s.subject_id): s
        for exam_id, exam_subjects in subjects_by_exam.items()
        for s in exam_subjects
    }
    marks: dict[str, list[SourceMark]] = {}
    for subject in subjects:
        subject_marks = []
        for source in config.sources:
            exam_subject = lookup.get((source.exam_id, subject.subject_id))
            profile = profiles.get(source.exam_id)
            if exam_subject is None or profile is None:
                continue
            paper = profile.score_for(exam_subject.id)
            subject_marks.append(
                SourceMark(
                    weight=float(source.weight),
                    max_score=exam_subject.max_score,
                    raw_score=paper.score if paper else None,
                )
            )
        marks[subject.subject_id] = subject_marks
    return marks


class ReportPublisher:
    """Builds, ranks, stores and announces the reports of one configuration."""

    def __init__(
        self,
        db: Session,
        gateway: SmsGateway | None = None,
        policy: EnginePolicy | None = None,
        viewer_base_url: str = "",
    ):
        self.db = db
        self.gateway = gateway
        self.engine = GradingEngine(policy)
        self.viewer_base_url = viewer_base_url
        self.configs = ReportConfigService(db)
        self.scales = GradingScaleService(db)
        self.exams = ExamService(db)
        self.students = StudentService(db)
        self.reports = PublishedReportService(db)

    def publish(
        self,
        school_id: int,
        config_id: int,
        filters: StudentFilter | None = None,
        notify: bool = True,
        cancel_event: threading.Event | None = None,
        ip_address: str | None = None,
    ) -> PublishSummary:
        """Publish reports for every active student in scope.

        Positions are always computed over the whole class, so a run scoped to
        one section stores the same positions a class-wide run would.

        Raises NotFoundError when the configuration or its grading scale is
        missing, PublishCancelledError when ``cancel_event`` is set before
        the batch is written, and PublishFailedError when the batch cannot
        be stored.
        """
        logger.info(f"[PUBLISH] Starting - school_id={school_id}, config_id={config_id}")

        config = self.configs.get_report_configuration(config_id, school_id)
        scale = self.scales.get_grading_scale(config.grading_scale_id, school_id).to_scale()

        subjects_by_exam = {
            source.exam_id: self.exams.get_exam_subjects(source.exam_id)
            for source in config.sources
        }
        subjects = unique_subjects(config, subjects_by_exam)
        students = self.students.get_active_students(school_id, filters)
        # Positions are class-wide, so a section run still grades every classmate
        cohort = students
        if filters and filters.section and students:
            cohort = self.students.get_class_roster(school_id, {s.class_name for s in students})
        logger.info(
            f"[PUBLISH] {len(students)} students ({len(cohort)} ranked), {len(subjects)} subjects, "
            f"{len(config.sources)} sources"
        )

        results: dict[int, StudentResult] = {}
        for index, student in enumerate(cohort):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"[PUBLISH] Cancelled after {index} students - config_id={config_id}")
                raise PublishCancelledError(config_id, index)

            profiles = {
                source.exam_id: self.exams.get_student_profile(school_id, source.exam_id, student.id)
                for source in config.sources
            }
            marks = source_marks(config, subjects, subjects_by_exam, profiles)
            results[student.id] = self.engine.evaluate(subjects, marks, scale)

        positions = self._rank_classes(cohort, results)

        published_at = datetime.now(timezone.utc)
        reports = [
            self._build_report(school_id, config, student, results[student.id], positions.get(student.id), published_at)
            for student in students
        ]

        try:
            self.reports.persist_batch(reports)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[PUBLISH] Batch write failed - config_id={config_id}: {str(e)}")
            raise PublishFailedError(
                "Reports could not be saved. No reports were published.",
                details={"config_id": config_id},
            ) from e

        logger.info(f"[PUBLISH] Stored {len(reports)} reports - config_id={config_id}")

        outcomes = self._notify(students, results) if notify else []
        sent = sum(1 for o in outcomes if o.status is DeliveryStatus.SENT)
        failed = [o for o in outcomes if o.status is DeliveryStatus.FAILED]

        AuditService(self.db).log(
            action=AuditAction.REPORTS_PUBLISHED,
            resource_type="report_configuration",
            resource_id=str(config_id),
            school_id=school_id,
            description=f"Published {len(reports)} reports for '{config.name}'",
            extra_data={
                "reports_generated": len(reports),
                "notifications_sent": sent,
                "notifications_failed": len(failed),
            },
            ip_address=ip_address,
        )

        return PublishSummary(
            config_id=config_id,
            reports_generated=len(reports),
            notifications_sent=sent,
            notifications_failed=len(failed),
            outcomes=outcomes,
            errors=[f"Student {o.student_id}: {o.error}" for o in failed],
            message=f"Published {len(reports)} reports and sent {sent} notifications.",
        )

    def _rank_classes(
        self,
        students: Sequence[Student],
        results: dict[int, StudentResult],
    ) -> dict[int, int | None]:
        """Rank each class separately; students without a rank map to None."""
        by_class: dict[str, dict[int, StudentResult]] = defaultdict(dict)
        for student in students:
            by_class[student.class_name][student.id] = results[student.id]

        positions: dict[int, int | None] = {}
        for class_results in by_class.values():
            for entry in self.engine.rank(class_results):
                positions[entry.key] = entry.rank
        return positions

    def _build_report(
        self,
        school_id: int,
        config: ReportConfiguration,
        student: Student,
        result: StudentResult,
        position: int | None,
        published_at: datetime,
    ) -> PublishedReport:
        return PublishedReport(
            school_id=school_id,
            student_id=student.id,
            student_name=student.full_name,
            student_reg_no=student.registration_number,
            config_id=config.id,
            config_name=config.name,
            scores=result.scores_dict(),
            aggregate=result.aggregate.aggregate,
            division=division_to_dict(result.division),
            position=position,
            total_marks=result.total_marks,
            published_at=published_at,
        )

    def _notify(
        self,
        students: Sequence[Student],
        results: dict[int, StudentResult],
    ) -> list[NotificationOutcome]:
        """Send result messages sequentially, collecting one outcome per student."""
        outcomes = []
        for student in students:
            if not student.guardian_phone:
                outcomes.append(NotificationOutcome(
                    student_id=student.id,
                    recipient=None,
                    status=DeliveryStatus.SKIPPED,
                    error="No guardian phone number",
                ))
                continue

            if self.gateway is None:
                outcomes.append(NotificationOutcome(
                    student_id=student.id,
                    recipient=student.guardian_phone,
                    status=DeliveryStatus.SKIPPED,
                    error="SMS gateway not configured",
                ))
                continue

            result = results[student.id]
            message = build_result_message(
                student_name=student.full_name,
                reg_no=student.registration_number,
                division=result.division.label,
                aggregate=result.aggregate.aggregate,
                viewer_base_url=self.viewer_base_url,
            )
            try:
                self.gateway.send(student.guardian_phone, message)
            except NotificationError as e:
                logger.warning(
                    f"[PUBLISH] Notification failed for student {student.id}: {e.reason}"
                )
                outcomes.append(NotificationOutcome(
                    student_id=student.id,
                    recipient=student.guardian_phone,
                    status=DeliveryStatus.FAILED,
                    error=e.reason,
                ))
                continue

            outcomes.append(NotificationOutcome(
                student_id=student.id,
                recipient=student.guardian_phone,
                status=DeliveryStatus.SENT,
            ))

        if self.gateway is None and outcomes:
            logger.info("[PUBLISH] SMS gateway not configured; notifications skipped")
        return outcomes
