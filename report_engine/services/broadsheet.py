"""Class broadsheet: every student's marks for one exam, ranked."""

import logging

from sqlalchemy.orm import Session

from report_engine.grading.engine import GradingEngine
from report_engine.grading.policy import EnginePolicy
from report_engine.grading.types import Present, StudentResult
from report_engine.schemas.broadsheet import (
    BroadsheetCell,
    BroadsheetColumn,
    BroadsheetResponse,
    BroadsheetRow,
)
from report_engine.schemas.report import DivisionSchema, StudentFilter
from report_engine.services.exam import ExamService, exam_marks, exam_subject_specs
from report_engine.services.grading_scale import GradingScaleService
from report_engine.services.student import StudentService

logger = logging.getLogger(__name__)


class BroadsheetService:
    """Builds the ranked class broadsheet for a single exam."""

    def __init__(self, db: Session, policy: EnginePolicy | None = None):
        self.db = db
        self.engine = GradingEngine(policy)
        self.exams = ExamService(db)
        self.scales = GradingScaleService(db)
        self.students = StudentService(db)

    def build(
        self,
        school_id: int,
        exam_id: int,
        class_name: str,
        section: str | None = None,
    ) -> BroadsheetResponse:
        exam = self.exams.get_exam(school_id, exam_id)
        scale = self.scales.get_grading_scale(exam.default_grading_scale_id, school_id).to_scale()
        subjects = self.exams.get_exam_subjects(exam_id)
        specs = exam_subject_specs(subjects)

        students = self.students.get_active_students(
            school_id, StudentFilter(class_name=class_name, section=section)
        )
        profiles = self.exams.get_profiles(school_id, exam_id, [s.id for s in students])

        results: dict[int, StudentResult] = {}
        for student in students:
            marks = exam_marks(subjects, profiles.get(student.id))
            results[student.id] = self.engine.evaluate(specs, marks, scale)

        students_by_id = {s.id: s for s in students}
        rows = []
        for entry in self.engine.rank(results):
            student = students_by_id[entry.key]
            profile = profiles.get(student.id)
            result = results[student.id]

            cells = {}
            for subject in subjects:
                paper = profile.score_for(subject.id) if profile else None
                outcome = result.outcomes.get(subject.subject_id)
                present = outcome if isinstance(outcome, Present) else None
                cells[subject.subject_id] = BroadsheetCell(
                    score=paper.score if paper else None,
                    final_score=present.final_score if present else None,
                    grade=present.grade if present else None,
                )

            rows.append(BroadsheetRow(
                student_id=student.id,
                student_name=student.full_name,
                registration_number=student.registration_number,
                scores=cells,
                aggregate=entry.aggregate,
                division=DivisionSchema.from_division(entry.division),
                position=entry.position,
            ))

        logger.info(
            f"[BROADSHEET] exam_id={exam_id}, class={class_name}, section={section}: {len(rows)} rows"
        )

        return BroadsheetResponse(
            exam_id=exam.id,
            exam_name=exam.name,
            class_name=class_name,
            section=section,
            columns=[
                BroadsheetColumn(
                    exam_subject_id=s.id,
                    subject_id=s.subject_id,
                    subject_name=s.subject_name,
                    max_score=s.max_score,
                    is_core_subject=s.is_core_subject,
                )
                for s in subjects
            ],
            rows=rows,
            total_students=len(students),
        )
