# quotes_api/core/errors.py
"""
Application error taxonomy and the exception handlers that turn it into the
standard JSON envelope: {"error": <ShortKind>, "message": <human text>}.
"""
import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise.exceptions import IntegrityError

from quotes_api.config import settings

logger = logging.getLogger("quotes_api.errors")


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.
    Subclasses set status_code and a default short kind; callers may override
    both the kind and the message.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "InternalServerError"
    message: str = "An internal server error occurred."

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.message
        self.error = error or self.error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "ValidationError"
    message = "Invalid request."


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    message = "Authentication is required."


class MissingToken(AuthenticationError):
    error = "AccessDenied"
    message = "An access token is required."


class InvalidToken(AuthenticationError):
    error = "InvalidToken"
    message = "The access token is invalid."


class ExpiredToken(AuthenticationError):
    error = "TokenExpired"
    message = "The access token has expired."


class AccountDisabled(AuthenticationError):
    error = "AccountDisabled"
    message = "This account has been disabled."


class InvalidCredentials(AuthenticationError):
    error = "InvalidCredentials"
    message = "Incorrect username or password."


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    message = "You do not have permission to perform this action."


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "NotFound"
    message = "The requested resource could not be found."


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Conflict"
    message = "A record with the same unique value already exists."


class LockedError(AppError):
    status_code = status.HTTP_423_LOCKED
    error = "AccountLocked"
    message = "The account is locked. Please try again later."


class InternalError(AppError):
    pass


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.message
    first = errors[0]
    # Drop the "body"/"query" prefix; keep the field path
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def _internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    body = InternalError().to_dict()
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationError(_first_error_message(exc)).to_dict(),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        body = NotFoundError("The requested API endpoint could not be found.").to_dict()
        body["path"] = request.url.path
        return JSONResponse(status_code=404, content=body)
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return JSONResponse(
            status_code=405,
            content={"error": "MethodNotAllowed", "message": "This method is not allowed on the endpoint."},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTPError", "message": str(exc.detail)},
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("%s %s -> integrity error: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content=ConflictError().to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s -> unhandled error", request.method, request.url.path, exc_info=exc)
    return _internal_error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
