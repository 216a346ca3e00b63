"""
Domain exceptions and the handlers that turn them into JSON responses.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AutoShopError(Exception):
    """Base class for errors raised by business logic."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AutoShopError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class ConflictError(AutoShopError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class BusinessRuleError(AutoShopError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "business_rule"


class AuthenticationError(AutoShopError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_type = "unauthorized"


class PermissionDeniedError(AutoShopError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "forbidden"


class FormValidationError(AutoShopError):
    """Field-level validation failures collected into a single error."""

    status_code = 422
    error_type = "validation_error"

    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors


async def handle_autoshop_error(request: Request, exc: AutoShopError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)

    body = {
        "success": False,
        "detail": exc.message,
        "error_type": exc.error_type,
    }
    if isinstance(exc, FormValidationError):
        body["errors"] = exc.errors

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "detail": "Internal server error. Please try again later.",
            "error_type": "server_error",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AutoShopError, handle_autoshop_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
