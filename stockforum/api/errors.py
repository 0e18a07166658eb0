# stockforum/api/errors.py
"""
App-wide exception handlers. Every failure leaves the API as
{"message": ..., "error": ...} with the status of its error class.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stockforum.domain.errors import ForumError, MissingConfigurationError

logger = logging.getLogger(__name__)


def error_body(message: str, error: str) -> dict:
    return {"message": message, "error": error}


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, type(exc).__name__),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
        message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(message, "ValidationError"),
        )

    @app.exception_handler(MissingConfigurationError)
    async def missing_config_handler(request: Request, exc: MissingConfigurationError) -> JSONResponse:
        logger.error("Configuration missing for %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body(str(exc), "MissingConfigurationError"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Server error", str(exc)),
        )
