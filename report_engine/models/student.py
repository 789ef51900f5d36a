"""Student model."""

import enum

from sqlalchemy import Enum, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from report_engine.core.database import Base
from report_engine.models.base import IDMixin, SchoolScopedMixin, TimestampMixin


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Student(Base, IDMixin, TimestampMixin, SchoolScopedMixin):
    """Student roster entry as read by report generation."""

    __tablename__ = "students"

    registration_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)  # 'class' is reserved keyword
    section: Mapped[str | None] = mapped_column(String(50), nullable=True)
    guardian_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[StudentStatus] = mapped_column(
        Enum(StudentStatus),
        default=StudentStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("school_id", "registration_number", name="uq_student_registration_number"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, reg_no={self.registration_number}, class={self.class_name})>"
