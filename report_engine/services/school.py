"""School (tenant) lookups."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.core.exceptions import NotFoundError
from report_engine.models.school import School


class SchoolService:
    """School read service."""

    def __init__(self, db: Session):
        self.db = db

    def get_school(self, school_id: int) -> School:
        """Get school by ID, suspended or not."""
        result = self.db.execute(select(School).where(School.id == school_id))
        school = result.scalar_one_or_none()
        if not school:
            raise NotFoundError("School", str(school_id))
        return school
