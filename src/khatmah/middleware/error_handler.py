"""Global error handlers — map domain errors to status codes with a `{message}` body.

Validation and prerequisite errors are the caller's to fix and get a 4xx with
an actionable message. Everything else collapses to a generic 500; the detail
goes to the log only.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from khatmah.errors import (
    AuthenticationError,
    ConflictError,
    IncompletePrerequisiteError,
    KhatmahError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = structlog.get_logger()

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def first_validation_message(exc: RequestValidationError) -> str:
    """Human-readable text of the first failed constraint, prefixed by its field."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid request"))
    return f"{field}: {message}" if field else message


def _internal_error(request: Request, event: str, exc: Exception) -> JSONResponse:
    logger.error(
        event,
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with a consistent JSON body."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies are a 400 with the first violated constraint."""
        return JSONResponse(status_code=400, content={"message": first_validation_message(exc)})

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(_request: Request, _exc: AuthenticationError) -> Response:
        return JSONResponse(
            status_code=401,
            content={"message": "Unauthorized"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ValidationError)
    async def domain_validation_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(IncompletePrerequisiteError)
    async def incomplete_prerequisite_handler(_request: Request, exc: IncompletePrerequisiteError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"message": exc.message, "completedParts": exc.completed_parts},
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"message": exc.message})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        """A valid session implies a valid user, so this is an invariant violation."""
        return _internal_error(request, "user_missing_for_session", exc)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        return _internal_error(request, "storage_failure", exc)

    @app.exception_handler(KhatmahError)
    async def domain_error_handler(request: Request, exc: KhatmahError) -> JSONResponse:
        return _internal_error(request, "unhandled_domain_error", exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        return _internal_error(request, "unhandled_exception", exc)
