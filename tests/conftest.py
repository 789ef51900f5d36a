"""Pytest configuration and shared fixtures.

Every test runs against a fresh in-memory SQLite schema. The database URL
is set before any application module is imported so that settings and
the engine pick it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REPORT_VIEWER_BASE_URL"] = "https://portal.example.org/"
os.environ.pop("SMS_GATEWAY_URL", None)

from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import report_engine.models  # noqa: F401  registers every table on Base.metadata
from report_engine.core.database import Base, SessionLocal, engine, get_db
from report_engine.core.dependencies import get_notification_gateway
from report_engine.grading.types import DivisionBand, GradeBand, Scale
from report_engine.models import (
    Exam,
    ExamSubject,
    GradingScale,
    ReportConfiguration,
    ReportSource,
    ScaleDivision,
    ScaleGrade,
    School,
    SchoolStatus,
    Student,
    StudentExamProfile,
    StudentPaperScore,
    StudentStatus,
)
from report_engine.main import app


# =============================================================================
# Grading Scale
# =============================================================================

GRADES = [
    ("D1", 80, 100, 1),
    ("D2", 75, 79, 2),
    ("C3", 70, 74, 3),
    ("C4", 65, 69, 4),
    ("C5", 60, 64, 5),
    ("C6", 55, 59, 6),
    ("P7", 50, 54, 7),
    ("P8", 45, 49, 8),
    ("F9", 0, 44, 9),
]

DIVISIONS = [
    ("Division 1", 4, 12),
    ("Division 2", 13, 23),
    ("Division 3", 24, 29),
    ("Division 4", 30, 34),
    ("Ungraded", 35, 36),
]

FAIL_VALUE = 9


@pytest.fixture
def scale() -> Scale:
    """Engine view of the standard nine-grade scale."""
    return Scale(
        fail_value=FAIL_VALUE,
        grades=tuple(GradeBand(name, lo, hi, value) for name, lo, hi, value in GRADES),
        divisions=tuple(DivisionBand(name, lo, hi) for name, lo, hi in DIVISIONS),
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Session over a freshly created schema, dropped after the test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


class Seed:
    """Builds schools, rosters, exams and report configurations for tests."""

    def __init__(self, db: Session):
        self.db = db
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def school(self, status: SchoolStatus = SchoolStatus.ACTIVE) -> School:
        n = self._next()
        school = School(name=f"School {n}", slug=f"school-{n}", status=status)
        self.db.add(school)
        self.db.flush()
        return school

    def grading_scale(self, school: School, grades=GRADES, divisions=DIVISIONS) -> GradingScale:
        scale = GradingScale(school_id=school.id, name="Standard", fail_value=FAIL_VALUE)
        scale.grades = [
            ScaleGrade(position=i, name=name, lower_bound=lo, upper_bound=hi, value=value)
            for i, (name, lo, hi, value) in enumerate(grades)
        ]
        scale.divisions = [
            ScaleDivision(position=i, name=name, min_aggregate=lo, max_aggregate=hi)
            for i, (name, lo, hi) in enumerate(divisions)
        ]
        self.db.add(scale)
        self.db.flush()
        return scale

    def student(
        self,
        school: School,
        first_name: str,
        last_name: str = "Test",
        class_name: str = "S4",
        section: str | None = "A",
        guardian_phone: str | None = None,
        status: StudentStatus = StudentStatus.ACTIVE,
    ) -> Student:
        student = Student(
            school_id=school.id,
            registration_number=f"REG{self._next():04d}",
            first_name=first_name,
            last_name=last_name,
            class_name=class_name,
            section=section,
            guardian_phone=guardian_phone,
            status=status,
        )
        self.db.add(student)
        self.db.flush()
        return student

    def exam(
        self,
        school: School,
        scale: GradingScale,
        subjects: list[tuple[str, str, int, bool]],
        name: str = "Mid Term",
    ) -> Exam:
        """Exam with subjects given as (subject_id, name, max_score, is_core)."""
        exam = Exam(
            school_id=school.id,
            name=name,
            term="Term 1",
            academic_year="2026",
            default_grading_scale_id=scale.id,
        )
        exam.subjects = [
            ExamSubject(
                subject_id=subject_id,
                subject_name=subject_name,
                max_score=Decimal(max_score),
                is_core_subject=is_core,
            )
            for subject_id, subject_name, max_score, is_core in subjects
        ]
        self.db.add(exam)
        self.db.flush()
        return exam

    def marks(self, exam: Exam, student: Student, scores: dict[str, float | None]) -> StudentExamProfile:
        """Raw paper marks keyed by subject_id; no grading is applied."""
        profile = StudentExamProfile(school_id=exam.school_id, exam_id=exam.id, student_id=student.id)
        by_subject = {s.subject_id: s for s in exam.subjects}
        profile.scores = [
            StudentPaperScore(
                exam_subject_id=by_subject[subject_id].id,
                score=None if score is None else Decimal(str(score)),
            )
            for subject_id, score in scores.items()
        ]
        self.db.add(profile)
        self.db.flush()
        return profile

    def config(
        self,
        school: School,
        scale: GradingScale,
        sources: list[tuple[Exam, float]],
        name: str = "End of Term Report",
    ) -> ReportConfiguration:
        config = ReportConfiguration(
            school_id=school.id,
            name=name,
            term="Term 1",
            academic_year="2026",
            grading_scale_id=scale.id,
        )
        config.sources = [
            ReportSource(exam_id=exam.id, position=i, weight=Decimal(str(weight)))
            for i, (exam, weight) in enumerate(sources)
        ]
        self.db.add(config)
        self.db.flush()
        return config


@pytest.fixture
def seed(db: Session) -> Seed:
    return Seed(db)


CORE_SUBJECTS = [
    ("ENG", "English", 100, True),
    ("MTC", "Mathematics", 100, True),
    ("BIO", "Biology", 100, True),
    ("CHE", "Chemistry", 100, True),
]


@pytest.fixture
def school_setup(seed: Seed):
    """One school with a scale, a four-core-subject exam and a single-source report."""
    school = seed.school()
    grading_scale = seed.grading_scale(school)
    exam = seed.exam(school, grading_scale, CORE_SUBJECTS + [("ART", "Fine Art", 50, False)])
    config = seed.config(school, grading_scale, [(exam, 100)])
    return school, grading_scale, exam, config


# =============================================================================
# API Client
# =============================================================================


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client whose requests share the test session; SMS sending disabled."""

    def override_get_db():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_gateway] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark tests by directory: unit/ tests are pure, the rest touch the database."""
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
