"""Exam, exam subject and student exam profile models."""

from decimal import Decimal

from sqlalchemy import DECIMAL, BigInteger, Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from report_engine.core.database import Base
from report_engine.models.base import IDMixin, JSONType, SchoolScopedMixin, TimestampMixin


class Exam(Base, IDMixin, TimestampMixin, SchoolScopedMixin):
    """An examination sitting. Immutable once created; referenced by id."""

    __tablename__ = "exams"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    term: Mapped[str] = mapped_column(String(50), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    default_grading_scale_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("grading_scales.id", ondelete="RESTRICT"),
        nullable=False,
    )

    subjects: Mapped[list["ExamSubject"]] = relationship(
        "ExamSubject",
        back_populates="exam",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ExamSubject.subject_name",
    )

    def __repr__(self) -> str:
        return f"<Exam(id={self.id}, name={self.name})>"


class ExamSubject(Base, IDMixin, TimestampMixin):
    """A subject offered in one exam, with that exam's maximum score and core flag."""

    __tablename__ = "exam_subjects"

    exam_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_id: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_name: Mapped[str] = mapped_column(String(100), nullable=False)
    max_score: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    is_core_subject: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    exam: Mapped["Exam"] = relationship("Exam", back_populates="subjects")

    __table_args__ = (
        UniqueConstraint("exam_id", "subject_id", name="uq_exam_subject"),
    )

    def __repr__(self) -> str:
        return f"<ExamSubject(exam_id={self.exam_id}, subject={self.subject_id})>"


class StudentExamProfile(Base, IDMixin, TimestampMixin, SchoolScopedMixin):
    """A student's marks for one exam, re-graded whenever marks are entered."""

    __tablename__ = "student_exam_profiles"

    exam_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    aggregate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Tagged division, e.g. {"kind": "classified", "name": "Division 1"}
    division: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    scores: Mapped[list["StudentPaperScore"]] = relationship(
        "StudentPaperScore",
        back_populates="profile",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_exam_student_profile"),
    )

    def score_for(self, exam_subject_id: int) -> "StudentPaperScore | None":
        for score in self.scores:
            if score.exam_subject_id == exam_subject_id:
                return score
        return None

    def __repr__(self) -> str:
        return f"<StudentExamProfile(exam_id={self.exam_id}, student_id={self.student_id})>"


class StudentPaperScore(Base, IDMixin):
    """One paper's raw mark with the grade it resolved to at entry time."""

    __tablename__ = "student_paper_scores"

    profile_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("student_exam_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exam_subject_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exam_subjects.id", ondelete="CASCADE"),
        nullable=False,
    )
    score: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    grade_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    profile: Mapped["StudentExamProfile"] = relationship("StudentExamProfile", back_populates="scores")

    __table_args__ = (
        UniqueConstraint("profile_id", "exam_subject_id", name="uq_profile_paper"),
    )
