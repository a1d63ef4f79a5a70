# errors.py - domain errors and the handlers that turn them into JSON responses
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("loan-manager")

GENERIC_SERVER_MESSAGE = "Something went wrong!"


class LoanManagerError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    default_message = GENERIC_SERVER_MESSAGE

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LoanManagerError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(LoanManagerError):
    status_code = 400
    default_message = "Email already exists"


class AuthError(LoanManagerError):
    status_code = 401
    default_message = "Invalid credentials"


class TokenError(ValidationError):
    default_message = "Invalid token."


class ForbiddenError(LoanManagerError):
    status_code = 403
    default_message = "Access denied."


class NotFoundError(LoanManagerError):
    status_code = 404
    default_message = "Not found"


class InvalidStateError(LoanManagerError):
    status_code = 400
    default_message = "Invalid state transition"


class ServerError(LoanManagerError):
    pass


def _error_body(exc):
    body = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return body


async def handle_domain_error(request: Request, exc: LoanManagerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": GENERIC_SERVER_MESSAGE})
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc))


async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # drop the "body"/"path" prefix, keep the field path the client sent
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query", "header")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return await handle_domain_error(request, ValidationError(errors=errors))


async def handle_unexpected_error(request: Request, exc: Exception):
    # ServerErrorMiddleware re-raises after this returns and the server logs the traceback
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": GENERIC_SERVER_MESSAGE})


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(LoanManagerError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected_error)
