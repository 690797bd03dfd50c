"""
Service error taxonomy and FastAPI exception handlers.

Services raise ProfileServiceError subclasses as close to the failure as
possible; the handlers registered here turn them into the JSON envelope
used by every endpoint:

    {"success": false, "message": "...", ...extra}

Anything unrecognised falls through to the generic handler, which logs the
traceback and answers 500 without leaking internal detail.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ProfileServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)


class InvalidInputError(ProfileServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class ProfileValidationError(ProfileServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message, errors=errors)
        self.errors = errors


class InvalidDomainError(ProfileServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid domain"

    def __init__(self, valid_domains: List[str], message: Optional[str] = None):
        super().__init__(message, valid_domains=valid_domains)
        self.valid_domains = valid_domains


class UnknownFieldError(ProfileServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, invalid_fields: Iterable[str], allowed_fields: Iterable[str]):
        invalid = sorted(invalid_fields)
        super().__init__(
            f"Invalid fields in request: {', '.join(invalid)}",
            invalid_fields=invalid,
            allowed_fields=sorted(allowed_fields),
        )
        self.invalid_fields = invalid


class LimitExceededError(ProfileServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Limit exceeded"


class UnauthorizedError(ProfileServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized to access this route"


class ForbiddenError(ProfileServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ProfileServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DuplicateKeyError(ProfileServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Duplicate key"


class ConflictError(ProfileServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record was modified concurrently, refresh and retry"


class ExternalServiceError(ProfileServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "External service unavailable"


def error_payload(message: str, **extra: Any) -> dict:
    return {"success": False, "message": message, **extra}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProfileServiceError)
    async def service_error_handler(request: Request, exc: ProfileServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(exc.message, **exc.extra),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_payload("Validation error", errors=errors),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_payload("Internal server error"),
        )
