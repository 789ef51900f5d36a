"""FastAPI dependency injection utilities."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from report_engine.core.database import get_db
from report_engine.core.exceptions import NotFoundError, SchoolSuspendedError
from report_engine.models.school import School, SchoolStatus
from report_engine.services.notification import SmsGateway, get_sms_gateway
from report_engine.services.school import SchoolService


class SchoolContextData:
    """Context object carrying the school (tenant) a request is scoped to."""

    def __init__(self, school: School):
        self.school = school

    @property
    def school_id(self) -> int:
        return self.school.id

    def is_suspended(self) -> bool:
        return self.school.status == SchoolStatus.SUSPENDED


def get_school_context(
    db: Annotated[Session, Depends(get_db)],
    x_school_id: str = Header(..., description="School ID"),
) -> SchoolContextData:
    """Resolve the school named by the X-School-Id header."""
    try:
        school_id = int(x_school_id)
    except ValueError:
        raise NotFoundError("School", x_school_id)

    return SchoolContextData(school=SchoolService(db).get_school(school_id))


def require_school_active(
    context: Annotated[SchoolContextData, Depends(get_school_context)],
) -> SchoolContextData:
    """Dependency that ensures the school is not suspended."""
    if context.is_suspended():
        raise SchoolSuspendedError(context.school_id)
    return context


def get_notification_gateway() -> Generator[SmsGateway | None, None, None]:
    """Per-request SMS gateway; None when sending is not configured."""
    gateway = get_sms_gateway()
    try:
        yield gateway
    finally:
        if gateway is not None:
            gateway.close()


# Type aliases for dependency injection
SchoolContext = Annotated[SchoolContextData, Depends(get_school_context)]
ActiveSchoolContext = Annotated[SchoolContextData, Depends(require_school_active)]
NotificationGateway = Annotated[SmsGateway | None, Depends(get_notification_gateway)]
