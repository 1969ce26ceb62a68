"""Exception handlers rendering ``{"message": ..., "errors": [...]}`` bodies."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from supplyboard.api.schemas import ErrorResponse

logger = structlog.get_logger()

VALIDATION_MESSAGES = {
    "/api/weather/current": "Invalid coordinates",
    "/api/weather/forecast": "Invalid coordinates",
    "/api/weather/city": "Invalid city name",
    "/api/weather/search": "Invalid search query",
}
DEFAULT_VALIDATION_MESSAGE = "Validation error"


def _error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn request validation failures into 400 responses."""
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    message = VALIDATION_MESSAGES.get(request.url.path, DEFAULT_VALIDATION_MESSAGE)
    logger.warning("Request validation failed", path=request.url.path, errors=errors)
    return _error_json(
        status.HTTP_400_BAD_REQUEST, ErrorResponse(message=message, errors=errors)
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP exceptions with a ``message`` field."""
    response = _error_json(exc.status_code, ErrorResponse(message=str(exc.detail)))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(message="Internal server error")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
