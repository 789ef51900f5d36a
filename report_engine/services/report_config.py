"""Report configuration lookups."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from report_engine.core.exceptions import NotFoundError
from report_engine.models.report import ReportConfiguration


class ReportConfigService:
    """Report configuration read service."""

    def __init__(self, db: Session):
        self.db = db

    def get_report_configuration(self, config_id: int, school_id: int) -> ReportConfiguration:
        """Get report configuration by ID."""
        result = self.db.execute(
            select(ReportConfiguration).where(
                ReportConfiguration.id == config_id,
                ReportConfiguration.school_id == school_id,
            )
        )
        config = result.scalar_one_or_none()
        if not config:
            raise NotFoundError("Report configuration", str(config_id))
        return config
