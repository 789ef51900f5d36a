"""Report configuration and publication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from report_engine.core.config import settings
from report_engine.core.database import get_db
from report_engine.core.dependencies import ActiveSchoolContext, NotificationGateway, SchoolContext
from report_engine.schemas.report import (
    PublishedReportResponse,
    PublishRequest,
    PublishSummary,
    ReportConfigurationResponse,
    StudentFilter,
)
from report_engine.services.published_report import PublishedReportService
from report_engine.services.publisher import ReportPublisher
from report_engine.services.report_config import ReportConfigService

router = APIRouter()


@router.get("/configs/{config_id}", response_model=ReportConfigurationResponse)
def get_report_configuration(
    config_id: int,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Get a report configuration with its weighted exam sources.
    """
    service = ReportConfigService(db)
    return service.get_report_configuration(config_id, context.school_id)


@router.post("/configs/{config_id}/publish", response_model=PublishSummary)
def publish_reports(
    config_id: int,
    context: ActiveSchoolContext,
    db: Annotated[Session, Depends(get_db)],
    gateway: NotificationGateway,
    http_request: Request,
    request: PublishRequest | None = None,
):
    """
    Compute and publish accumulated reports for all active students in scope,
    then notify guardians.
    Republishing overwrites each student's report for this configuration.
    Notification failures are reported in the summary and never fail the request.
    """
    request = request or PublishRequest()
    publisher = ReportPublisher(
        db,
        gateway=gateway,
        policy=settings.engine_policy,
        viewer_base_url=settings.REPORT_VIEWER_BASE_URL,
    )
    return publisher.publish(
        context.school_id,
        config_id,
        filters=StudentFilter(class_name=request.class_name, section=request.section),
        notify=request.notify,
        ip_address=http_request.client.host if http_request.client else None,
    )


@router.get("/configs/{config_id}/published", response_model=list[PublishedReportResponse])
def list_published_reports(
    config_id: int,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
):
    """
    List published reports of a configuration, best position first.
    """
    service = PublishedReportService(db)
    return [service.to_response(r) for r in service.list_reports(context.school_id, config_id)]


@router.get("/published/{reg_no}", response_model=PublishedReportResponse)
def get_published_report(
    reg_no: str,
    context: SchoolContext,
    db: Annotated[Session, Depends(get_db)],
    config_id: int = Query(..., description="Report configuration ID"),
):
    """
    Look up one student's published report by registration number.
    """
    service = PublishedReportService(db)
    return service.to_response(service.get_report(context.school_id, reg_no, config_id))
