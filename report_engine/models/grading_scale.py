"""Grading scale models."""

from sqlalchemy import BigInteger, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from report_engine.core.database import Base
from report_engine.grading.types import DivisionBand, GradeBand, Scale
from report_engine.models.base import IDMixin, SchoolScopedMixin, TimestampMixin


class GradingScale(Base, IDMixin, TimestampMixin, SchoolScopedMixin):
    """School-configured mapping from percentage to grade and aggregate to division."""

    __tablename__ = "grading_scales"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Grade value at or above which a core subject counts as failed (e.g. 9 for F9)
    fail_value: Mapped[int] = mapped_column(Integer, nullable=False)

    grades: Mapped[list["ScaleGrade"]] = relationship(
        "ScaleGrade",
        back_populates="scale",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ScaleGrade.position",
    )
    divisions: Mapped[list["ScaleDivision"]] = relationship(
        "ScaleDivision",
        back_populates="scale",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ScaleDivision.position",
    )

    def to_scale(self) -> Scale:
        """Engine view of this scale, bands in configured order."""
        return Scale(
            fail_value=self.fail_value,
            grades=tuple(
                GradeBand(
                    name=g.name,
                    lower_bound=g.lower_bound,
                    upper_bound=g.upper_bound,
                    value=g.value,
                    comment=g.comment,
                )
                for g in self.grades
            ),
            divisions=tuple(
                DivisionBand(
                    name=d.name,
                    min_aggregate=d.min_aggregate,
                    max_aggregate=d.max_aggregate,
                )
                for d in self.divisions
            ),
            scale_id=self.id,
        )

    def __repr__(self) -> str:
        return f"<GradingScale(id={self.id}, name={self.name})>"


class ScaleGrade(Base, IDMixin):
    """One grade band (e.g. D1 = 80..100, value 1)."""

    __tablename__ = "grading_scale_grades"

    scale_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("grading_scales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(20), nullable=False)
    lower_bound: Mapped[float] = mapped_column(Float, nullable=False)
    upper_bound: Mapped[float] = mapped_column(Float, nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    scale: Mapped["GradingScale"] = relationship("GradingScale", back_populates="grades")


class ScaleDivision(Base, IDMixin):
    """One division band (e.g. Division 1 = aggregate 4..12)."""

    __tablename__ = "grading_scale_divisions"

    scale_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("grading_scales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    min_aggregate: Mapped[int] = mapped_column(Integer, nullable=False)
    max_aggregate: Mapped[int] = mapped_column(Integer, nullable=False)

    scale: Mapped["GradingScale"] = relationship("GradingScale", back_populates="divisions")
