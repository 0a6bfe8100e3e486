# vidtube/core/errors.py
"""
Error taxonomy for the identity service.

Every failure surfaced to a client is one of the ApiError kinds below.
Each carries an HTTP status code, a human-readable message and an optional
list of sub-errors; `vidtube.main` renders them as the uniform envelope:

    {"success": false, "statusCode": ..., "kind": ..., "message": ..., "errors": [...], "data": null}
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")


class ApiError(Exception):
    """Base class for all errors returned to API clients."""
    kind = "API_ERROR"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        self.status_code = status_code or self.default_status
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "statusCode": self.status_code,
            "kind": self.kind,
            "message": self.message,
            "errors": self.errors,
            "data": None,
        }


class ValidationError(ApiError):
    """Missing or empty required field."""
    kind = "VALIDATION_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(ApiError):
    """Bad credentials or an invalid/stale/mismatched token."""
    kind = "AUTH_ERROR"
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class NotFoundError(ApiError):
    kind = "NOT_FOUND"
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    """Duplicate value for a unique field."""
    kind = "CONFLICT"
    default_status = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(ApiError):
    kind = "INTERNAL_ERROR"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def require_fields(**fields: str | None) -> dict[str, str]:
    """
    Trim every given field and fail with ValidationError if any is empty.

    Returns the trimmed values keyed by field name.
    """
    cleaned = {name: (value or "").strip() for name, value in fields.items()}
    missing = [name for name, value in cleaned.items() if not value]
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
            errors=[{"field": name, "message": "required"} for name in missing],
        )
    return cleaned


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError(
        "Invalid request body",
        errors=[
            {"field": ".".join(str(p) for p in e.get("loc", ())[1:]), "message": e.get("msg", "")}
            for e in exc.errors()
        ],
    )
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[errors] unhandled exception on %s %s", request.method, request.url.path)
    err = InternalError()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())
