"""School (tenant) model."""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from report_engine.core.database import Base
from report_engine.models.base import IDMixin, TimestampMixin


class SchoolStatus(str, enum.Enum):
    """School status enumeration."""

    ACTIVE = "active"
    SUSPENDED = "suspended"


class School(Base, IDMixin, TimestampMixin):
    """School (tenant) model."""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    status: Mapped[SchoolStatus] = mapped_column(
        Enum(SchoolStatus),
        default=SchoolStatus.ACTIVE,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name={self.name})>"
