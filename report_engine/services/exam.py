"""Exam service: exam subjects, student profiles and marks entry."""

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.core.exceptions import NotFoundError, ValidationError
from report_engine.grading.engine import GradingEngine
from report_engine.grading.policy import CompletenessPolicy, EnginePolicy
from report_engine.grading.types import Present, SourceMark, StudentResult, SubjectSpec, division_to_dict, division_from_dict
from report_engine.models.exam import Exam, ExamSubject, StudentExamProfile, StudentPaperScore
from report_engine.models.student import Student
from report_engine.schemas.exam import (
    MarksEntryRequest,
    MarksEntryResult,
    PaperScoreResponse,
    StudentExamProfileResponse,
)
from report_engine.schemas.report import DivisionSchema
from report_engine.services.grading_scale import GradingScaleService

logger = logging.getLogger(__name__)


def exam_subject_specs(subjects: Sequence[ExamSubject]) -> list[SubjectSpec]:
    return [
        SubjectSpec(
            subject_id=s.subject_id,
            subject_name=s.subject_name,
            is_core=s.is_core_subject,
        )
        for s in subjects
    ]


def exam_marks(
    subjects: Sequence[ExamSubject],
    profile: StudentExamProfile | None,
) -> dict[str, list[SourceMark]]:
    """Marks of a single exam as one full-weight source per subject."""
    marks: dict[str, list[SourceMark]] = {}
    if profile is None:
        return marks
    for subject in subjects:
        paper = profile.score_for(subject.id)
        marks[subject.subject_id] = [
            SourceMark(
                weight=100,
                max_score=subject.max_score,
                raw_score=paper.score if paper else None,
            )
        ]
    return marks


class ExamService:
    """Exam read service and marks entry."""

    def __init__(self, db: Session, policy: EnginePolicy | None = None):
        self.db = db
        # Marks entry keeps whatever core grades exist in the profile aggregate
        self.engine = GradingEngine(policy or EnginePolicy(completeness=CompletenessPolicy.LENIENT))

    def get_exam(self, school_id: int, exam_id: int) -> Exam:
        """Get exam by ID."""
        result = self.db.execute(
            select(Exam).where(
                Exam.id == exam_id,
                Exam.school_id == school_id,
            )
        )
        exam = result.scalar_one_or_none()
        if not exam:
            raise NotFoundError("Exam", str(exam_id))
        return exam

    def get_exam_subjects(self, exam_id: int) -> list[ExamSubject]:
        """Subjects offered in an exam, ordered by name."""
        result = self.db.execute(
            select(ExamSubject)
            .where(ExamSubject.exam_id == exam_id)
            .order_by(ExamSubject.subject_name, ExamSubject.id)
        )
        return list(result.scalars().all())

    def get_student_profile(
        self,
        school_id: int,
        exam_id: int,
        student_id: int,
    ) -> StudentExamProfile | None:
        """A student's profile for an exam, or None if the student has no marks."""
        result = self.db.execute(
            select(StudentExamProfile).where(
                StudentExamProfile.school_id == school_id,
                StudentExamProfile.exam_id == exam_id,
                StudentExamProfile.student_id == student_id,
            )
        )
        return result.scalar_one_or_none()

    def get_profiles(
        self,
        school_id: int,
        exam_id: int,
        student_ids: Sequence[int],
    ) -> dict[int, StudentExamProfile]:
        """Profiles for many students at once, keyed by student ID."""
        if not student_ids:
            return {}
        result = self.db.execute(
            select(StudentExamProfile).where(
                StudentExamProfile.school_id == school_id,
                StudentExamProfile.exam_id == exam_id,
                StudentExamProfile.student_id.in_(student_ids),
            )
        )
        return {p.student_id: p for p in result.scalars().all()}

    def get_profile_response(
        self,
        school_id: int,
        exam_id: int,
        student_id: int,
    ) -> StudentExamProfileResponse:
        self.get_exam(school_id, exam_id)
        profile = self.get_student_profile(school_id, exam_id, student_id)
        if not profile:
            raise NotFoundError("Exam profile", f"{exam_id}/{student_id}")
        return self._profile_to_response(profile)

    # ==========================================
    # Marks Entry
    # ==========================================

    def record_marks(
        self,
        school_id: int,
        exam_id: int,
        request: MarksEntryRequest,
    ) -> MarksEntryResult:
        """Write marks for one or more students and re-grade their profiles.

        Every mark is validated before anything is written: a mark outside
        0..max_score, an unknown subject or a student from another school
        rejects the whole request.
        """
        exam = self.get_exam(school_id, exam_id)
        scale = GradingScaleService(self.db).get_grading_scale(
            exam.default_grading_scale_id, school_id
        ).to_scale()
        subjects = self.get_exam_subjects(exam_id)
        subjects_by_id = {s.id: s for s in subjects}

        student_ids = [entry.student_id for entry in request.students]
        students = self._get_students(school_id, student_ids)

        errors = []
        seen: set[int] = set()
        for entry in request.students:
            if entry.student_id in seen:
                errors.append({
                    "student_id": entry.student_id,
                    "message": f"Student ID {entry.student_id} appears more than once",
                })
                continue
            seen.add(entry.student_id)
            if entry.student_id not in students:
                errors.append({
                    "student_id": entry.student_id,
                    "message": f"Student ID {entry.student_id} not found",
                })
                continue
            for mark in entry.marks:
                subject = subjects_by_id.get(mark.exam_subject_id)
                if not subject:
                    errors.append({
                        "student_id": entry.student_id,
                        "exam_subject_id": mark.exam_subject_id,
                        "message": f"Subject {mark.exam_subject_id} is not part of exam {exam_id}",
                    })
                elif mark.score is not None and not 0 <= mark.score <= subject.max_score:
                    errors.append({
                        "student_id": entry.student_id,
                        "exam_subject_id": mark.exam_subject_id,
                        "message": (
                            f"Score {mark.score} for {subject.subject_name} must be between "
                            f"0 and {subject.max_score}"
                        ),
                    })

        if errors:
            raise ValidationError("Invalid marks. No marks were saved.", details={"errors": errors})

        specs = exam_subject_specs(subjects)
        profiles = []
        for entry in request.students:
            profile = self.get_student_profile(school_id, exam_id, entry.student_id)
            if not profile:
                profile = StudentExamProfile(
                    school_id=school_id,
                    exam_id=exam_id,
                    student_id=entry.student_id,
                )
                self.db.add(profile)

            for mark in entry.marks:
                paper = profile.score_for(mark.exam_subject_id)
                if paper is None:
                    paper = StudentPaperScore(exam_subject_id=mark.exam_subject_id)
                    profile.scores.append(paper)
                paper.score = mark.score

            result = self.engine.evaluate(specs, exam_marks(subjects, profile), scale)
            self._apply_result(profile, subjects, result)
            profiles.append(profile)

        self.db.flush()
        logger.info(
            f"[MARKS] Recorded marks for {len(profiles)} students - school_id={school_id}, exam_id={exam_id}"
        )

        return MarksEntryResult(
            exam_id=exam_id,
            profiles=[self._profile_to_response(p) for p in profiles],
            message=f"Saved marks for {len(profiles)} students.",
        )

    def _apply_result(
        self,
        profile: StudentExamProfile,
        subjects: Sequence[ExamSubject],
        result: StudentResult,
    ) -> None:
        """Copy engine output onto the stored profile and its paper scores."""
        for subject in subjects:
            paper = profile.score_for(subject.id)
            if paper is None:
                continue
            outcome = result.outcomes.get(subject.subject_id)
            if isinstance(outcome, Present):
                paper.grade = outcome.grade
                paper.grade_value = outcome.value
            else:
                paper.grade = None
                paper.grade_value = None

        has_core = result.aggregate.core_total > 0
        profile.aggregate = result.aggregate.aggregate if has_core else None
        profile.division = division_to_dict(result.division)

    def _get_students(self, school_id: int, student_ids: Sequence[int]) -> dict[int, Student]:
        result = self.db.execute(
            select(Student).where(
                Student.school_id == school_id,
                Student.id.in_(student_ids),
            )
        )
        return {s.id: s for s in result.scalars().all()}

    def _profile_to_response(self, profile: StudentExamProfile) -> StudentExamProfileResponse:
        return StudentExamProfileResponse(
            id=profile.id,
            exam_id=profile.exam_id,
            student_id=profile.student_id,
            aggregate=profile.aggregate,
            division=DivisionSchema.from_division(division_from_dict(profile.division)),
            scores=[
                PaperScoreResponse.model_validate(s)
                for s in sorted(profile.scores, key=lambda s: s.exam_subject_id)
            ],
        )
