"""FastAPI exception handlers for domain and storage errors.

ApiError is converted to a ToolError JSON body with a status taken from
ERROR_CODE_TO_HTTP_STATUS. Database errors that escape a route are mapped
the same way: an unreachable store is 503 (clients and payment providers
retry), anything else is 500. Driver messages are only exposed in the
development environment.

Usage:
    from api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""


from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from shared.models.errors import ApiError, ErrorCode, ToolError
from shared.services.database import DatabaseServiceError, StoreUnavailableError
from shared.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Request validation -> 400 Bad Request
    ErrorCode.MISSING_REQUIRED_FIELDS: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FILE_TYPE: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: HTTP_400_BAD_REQUEST,
    # Upload limits -> 413
    ErrorCode.FILE_TOO_LARGE: HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    # Uniqueness -> 409 Conflict
    ErrorCode.USER_ALREADY_EXISTS: HTTP_409_CONFLICT,
    # Retryable server-side failures -> 503
    ErrorCode.WEBHOOK_PROCESSING_FAILED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.STORE_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
    # Other server-side failures -> 500
    ErrorCode.STORE_WRITE_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode (400 if not mapped)."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_development)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Convert ApiError to a ToolError JSON response."""
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_tool_error().model_dump(mode="json"),
    )


async def database_error_handler(request: Request, exc: DatabaseServiceError) -> JSONResponse:
    """Convert database failures that escaped a route."""
    if isinstance(exc, StoreUnavailableError):
        code = ErrorCode.STORE_UNAVAILABLE
    else:
        code = ErrorCode.STORE_WRITE_FAILED
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)

    details = {"error": str(exc)} if _is_development(request) else None
    return JSONResponse(
        status_code=get_http_status_for_error(code),
        content=ToolError.from_code(code, details).model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DatabaseServiceError, database_error_handler)  # type: ignore[arg-type]
