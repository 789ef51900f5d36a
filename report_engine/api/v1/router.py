"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from report_engine.api.v1.endpoints import (
    broadsheets,
    exams,
    grading_scales,
    reports,
)

api_router = APIRouter()

# Grading scales (school-scoped)
api_router.include_router(
    grading_scales.router,
    prefix="/grading-scales",
    tags=["Grading Scales"],
)

# Exams and marks entry (school-scoped)
api_router.include_router(
    exams.router,
    prefix="/exams",
    tags=["Exams"],
)

# Broadsheets (school-scoped)
api_router.include_router(
    broadsheets.router,
    prefix="/broadsheets",
    tags=["Broadsheets"],
)

# Report configurations and publication (school-scoped)
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"],
)
