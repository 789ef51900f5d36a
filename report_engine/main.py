"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from report_engine.api.v1.router import api_router
from report_engine.core.config import settings
from report_engine.core.database import engine
from report_engine.core.exceptions import AppException
from report_engine.middleware.logging import RequestLoggingMiddleware
from report_engine.schemas.common import ErrorResponse

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Library loggers that would drown out [PUBLISH] and [MARKS] lines
for noisy in ("sqlalchemy", "sqlalchemy.engine", "httpx", "httpcore"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

DESCRIPTION = """
Academic performance aggregation and report publication for a multi-school portal.

Every endpoint except `/health` is scoped by an `X-School-Id` header; suspended
schools can read but not record marks or publish. Errors use the envelope
`{"success": false, "error": {"code", "message", "details"}}`.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    policy = settings.engine_policy
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION} - "
        f"completeness={policy.completeness.value}, score_range={policy.score_range.value}, "
        f"boundaries={policy.boundary_mode.value}"
    )
    if not settings.SMS_GATEWAY_URL:
        logger.warning("SMS_GATEWAY_URL is not set; result notifications will be skipped")
    yield
    logger.info("Shutting down application")
    engine.dispose()


def error_response(status_code: int, code: str, message: str, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message, "details": details or {}},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure in the common error envelope."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # ctx may hold the raised exception itself
        errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
        return error_response(422, "VALIDATION_ERROR", "Request validation failed", {"errors": errors})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(500, "INTERNAL_ERROR", "An internal server error occurred")


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=DESCRIPTION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy", "app": settings.APP_NAME, "version": settings.APP_VERSION}

    app.include_router(
        api_router,
        prefix=settings.API_V1_PREFIX,
        responses={code: {"model": ErrorResponse} for code in (403, 404, 409, 422, 500)},
    )
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("report_engine.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
