from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies.rate_limits import setup_rate_limiter, get_limiter
from api.router import api_router
from infrastructure.logging import (
    bind_request_context,
    get_correlation_id,
    get_module_logger,
)
from infrastructure.models import ErrorResponse
from infrastructure.services import get_settings
from modules.notifications.domain.errors import NotificationError
from server.lifespan import lifespan

logger = get_module_logger()

CORRELATION_HEADER = "X-Correlation-ID"


def _error_response(
    status_code: int,
    error: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, error_code=error_code, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def notification_error_handler(request: Request, exc: Exception):
    """Map domain errors onto their HTTP status and the error envelope."""
    if not isinstance(exc, NotificationError):
        return await unhandled_error_handler(request, exc)
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=exc.message,
            error_code=exc.error_code,
        )
    return _error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def validation_error_handler(_request: Request, exc: Exception):
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]
    return _error_response(
        400, "Request validation failed", "VALIDATION_ERROR", {"errors": details}
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_request_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return _error_response(500, "Internal server error", "INTERNAL_ERROR")


async def correlation_middleware(request: Request, call_next):
    """Bind a correlation id to every log emitted while serving the request.

    A caller-supplied X-Correlation-ID is reused, otherwise one is generated.
    Either way it is echoed back on the response.
    """
    with bind_request_context(
        correlation_id=request.headers.get(CORRELATION_HEADER),
        request_path=request.url.path,
        request_method=request.method,
    ):
        correlation_id = get_correlation_id()
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id or ""
    return response


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Notification Engine", lifespan=lifespan)
    setup_rate_limiter(app)

    allow_origins = (
        ["*"] if settings.is_production else settings.server.CORS_ALLOW_ORIGINS
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(correlation_middleware)

    app.add_exception_handler(NotificationError, notification_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)
    return app


handler = create_app()
limiter = get_limiter()
