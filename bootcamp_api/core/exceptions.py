# bootcamp_api/core/exceptions.py
# Domain errors and the handlers that render every failure as
# {"success": false, "error": <message>}.

import logging

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ErrorResponse(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ErrorResponse):
    status_code = 400


class UnauthorizedError(ErrorResponse):
    status_code = 401

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(message)


class ForbiddenError(ErrorResponse):
    status_code = 403


class NotFoundError(ErrorResponse):
    status_code = 404


class GeocodingError(ErrorResponse):
    """Raised when an address or zipcode can't be resolved to a point."""

    status_code = 400

    def __init__(self, address: str):
        super().__init__(f"Could not geocode address: {address}")
        self.address = address


class OwnerLimitError(BadRequestError):
    """A non-admin tried to publish a second bootcamp."""

    def __init__(self, user_id: str):
        super().__init__(f"The user with id {user_id} has already published a bootcamp")
        self.user_id = user_id


# =============================================================================
# Helpers
# =============================================================================

def error_envelope(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(errors) -> str:
    messages = []
    for err in errors:
        msg = err.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            msg = f"{'.'.join(loc)}: {msg}"
        messages.append(msg)
    return ",".join(messages)


# =============================================================================
# Handlers
# =============================================================================

async def error_response_handler(request: Request, exc: ErrorResponse) -> JSONResponse:
    return error_envelope(exc.status_code, exc.message)


async def invalid_id_handler(request: Request, exc: InvalidId) -> JSONResponse:
    return error_envelope(404, "Resource not found")


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    return error_envelope(400, "Duplicate field value entered")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_envelope(400, _validation_message(exc.errors()))


async def model_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_envelope(400, _validation_message(exc.errors()))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_envelope(exc.status_code, exc.detail)


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # sync: SlowAPIMiddleware calls this directly without awaiting
    return error_envelope(429, "Too many requests, please try again later")


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return error_envelope(500, "Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ErrorResponse, error_response_handler)
    app.add_exception_handler(InvalidId, invalid_id_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, model_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, server_error_handler)
