"""Report configuration and published report models."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from report_engine.core.database import Base
from report_engine.models.base import IDMixin, JSONType, SchoolScopedMixin, TimestampMixin


class ReportConfiguration(Base, IDMixin, TimestampMixin, SchoolScopedMixin):
    """How several exams combine into one accumulated report."""

    __tablename__ = "report_configurations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    term: Mapped[str] = mapped_column(String(50), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    grading_scale_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("grading_scales.id", ondelete="RESTRICT"),
        nullable=False,
    )

    sources: Mapped[list["ReportSource"]] = relationship(
        "ReportSource",
        back_populates="config",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ReportSource.position",
    )

    def __repr__(self) -> str:
        return f"<ReportConfiguration(id={self.id}, name={self.name})>"


class ReportSource(Base, IDMixin):
    """One contributing exam and its weight. Weights need not sum to 100."""

    __tablename__ = "report_sources"

    config_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("report_configurations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    exam_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("exams.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weight: Mapped[Decimal] = mapped_column(DECIMAL(5, 2), nullable=False)

    config: Mapped["ReportConfiguration"] = relationship("ReportConfiguration", back_populates="sources")

    __table_args__ = (
        CheckConstraint("weight >= 0 AND weight <= 100", name="ck_report_source_weight"),
        UniqueConstraint("config_id", "exam_id", name="uq_report_source_exam"),
    )


class PublishedReport(Base, IDMixin, SchoolScopedMixin):
    """Denormalized report snapshot, one per (registration number, configuration).

    Republishing a configuration overwrites the row under the same key.
    """

    __tablename__ = "published_reports"

    student_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_reg_no: Mapped[str] = mapped_column(String(50), nullable=False)
    config_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("report_configurations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    config_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # subject_id -> {"final_score", "grade", "value"}; absent subjects are omitted
    scores: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    aggregate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    division: Mapped[dict] = mapped_column(JSONType, nullable=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("school_id", "student_reg_no", "config_id", name="uq_published_report_key"),
    )

    @property
    def report_key(self) -> str:
        return f"{self.student_reg_no}_{self.config_id}"

    def __repr__(self) -> str:
        return f"<PublishedReport(key={self.report_key})>"
