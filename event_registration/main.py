import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from event_registration.core.database_manager import DatabaseManager, db_manager
from event_registration.core.errors import DomainError, ErrorCode, ValidationFailedError
from event_registration.core.locks import EventLockManager
from event_registration.core.logging_config import setup_logging
from event_registration.core.settings import Settings, get_settings
from event_registration.middleware.monitoring import (
    MonitoringMiddleware,
    get_health_status,
    get_prometheus_metrics,
)
from event_registration.schemas.common import ErrorDetail, ErrorResponse

from .api.api import api_router

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int, message: str, code: str, detail: Any = None
) -> JSONResponse:
    body = ErrorResponse(message=message, error=ErrorDetail(code=code, detail=detail))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Domain failure on %s: %s", request.url.path, exc)
    else:
        logger.info("Request to %s rejected: %s", request.url.path, exc)
    return _error_response(exc.status_code, exc.message, exc.code.value, exc.detail)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return await domain_exception_handler(
        request, ValidationFailedError("Validation failed", detail=errors)
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return _error_response(exc.status_code, str(exc.detail), code)


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.exception("Database error on %s", request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database operation failed",
        ErrorCode.INTERNAL_ERROR.value,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception occurred: %s", exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        ErrorCode.INTERNAL_ERROR.value,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables when configured, verify the database, dispose on exit."""
    manager: DatabaseManager = app.state.db_manager
    settings: Settings = app.state.settings
    logger.info("Starting %s %s", settings.PROJECT_NAME, settings.VERSION)

    if settings.database.DB_CREATE_TABLES:
        await manager.create_tables()

    db_health = await manager.health_check()
    if db_health.get("status") == "healthy":
        logger.info("Database connection verified")
    else:
        logger.warning("Database health check failed: %s", db_health.get("message"))

    try:
        yield
    finally:
        await manager.close()
        logger.info("Application shutdown completed")


def create_app(
    manager: Optional[DatabaseManager] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Assemble the API around one database manager and one lock registry."""
    settings = settings or get_settings()
    setup_logging(settings.monitoring)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Events and capacity-checked participant registrations.",
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_manager = manager or db_manager
    app.state.event_locks = EventLockManager()

    app.add_middleware(MonitoringMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials="*" not in settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router, prefix=settings.API_PREFIX)

    app.add_exception_handler(DomainError, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/", tags=["Root"], summary="API Information")
    async def root() -> dict[str, Any]:
        return {
            "message": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "endpoints": {
                "events": f"{settings.API_PREFIX}/events",
                "registrations": f"{settings.API_PREFIX}/registrations",
            },
        }

    @app.get(settings.monitoring.HEALTH_CHECK_PATH, tags=["Health"], summary="Health Check")
    async def health_check(request: Request) -> JSONResponse:
        result = await get_health_status(
            request.app.state.db_manager, request.app.state.settings
        )
        code = (
            status.HTTP_200_OK
            if result["status"] == "healthy"
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(status_code=code, content=jsonable_encoder(result))

    @app.get(settings.monitoring.PROMETHEUS_PATH, tags=["Monitoring"], summary="Prometheus Metrics")
    async def metrics() -> PlainTextResponse:
        if not settings.monitoring.ENABLE_PROMETHEUS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Metrics endpoint is disabled"
            )
        return PlainTextResponse(
            content=await get_prometheus_metrics(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app


app = create_app()
