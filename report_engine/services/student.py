"""Student roster lookups used by report generation."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.models.student import Student, StudentStatus
from report_engine.schemas.report import StudentFilter


class StudentService:
    """Read access to the student roster."""

    def __init__(self, db: Session):
        self.db = db

    def get_active_students(
        self,
        school_id: int,
        filters: StudentFilter | None = None,
    ) -> list[Student]:
        """Active students of a school, ordered by class then name."""
        query = select(Student).where(
            Student.school_id == school_id,
            Student.status == StudentStatus.ACTIVE,
        )

        if filters:
            if filters.class_name:
                query = query.where(Student.class_name == filters.class_name)
            if filters.section:
                query = query.where(Student.section == filters.section)

        query = query.order_by(
            Student.class_name,
            Student.last_name,
            Student.first_name,
            Student.id,
        )
        result = self.db.execute(query)
        return list(result.scalars().all())

    def get_class_roster(self, school_id: int, class_names: Iterable[str]) -> list[Student]:
        """Active students of the given classes across all their sections."""
        result = self.db.execute(
            select(Student)
            .where(
                Student.school_id == school_id,
                Student.status == StudentStatus.ACTIVE,
                Student.class_name.in_(set(class_names)),
            )
            .order_by(Student.class_name, Student.last_name, Student.first_name, Student.id)
        )
        return list(result.scalars().all())
