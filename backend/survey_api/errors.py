"""Error taxonomy of the API and the handlers that render it as ``{"error": {...}}``."""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from survey_api.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for every error that reaches the client with a status and a code."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, code: str | None = None, **extra):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.extra = extra

    def to_payload(self) -> dict:
        return {"error": {"message": self.message, "code": self.code, **self.extra}}


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class StoreError(AppError):
    status_code = 500
    code = "STORE_ERROR"


class AggregationError(StoreError):
    code = "AGGREGATION_ERROR"

    def __init__(self, survey_id: str, cause: Exception):
        super().__init__(
            f"Failed to build the analysis for survey {survey_id}.",
            surveyId=survey_id,
        )
        self.survey_id = survey_id
        self.cause = cause


class InternalError(AppError):
    status_code = 500
    code = "INTERNAL_ERROR"


def _log_error(request: Request, exc: AppError, original: Exception | None = None):
    context = f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}"
    if exc.status_code < 500:
        logger.warning("[error] %s", context)
        return
    # Tracebacks only outside production.
    source = original or exc
    if _show_stack():
        logger.error("[error] %s", context, exc_info=(type(source), source, source.__traceback__))
    else:
        logger.error("[error] %s", context)


def _show_stack() -> bool:
    return settings.DEBUG and not settings.is_production


def _render(exc: AppError, original: Exception | None = None) -> JSONResponse:
    payload = exc.to_payload()
    if exc.status_code >= 500 and _show_stack():
        source = original or exc
        payload["error"]["stack"] = "".join(
            traceback.format_exception(type(source), source, source.__traceback__)
        )
    return JSONResponse(status_code=exc.status_code, content=payload)


async def handle_app_error(request: Request, exc: AppError):
    original = getattr(exc, "cause", None) or exc.__cause__
    _log_error(request, exc, original)
    return _render(exc, original)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    details = {}
    for item in exc.errors():
        key = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        details[key or "body"] = item.get("msg", "invalid value")
    error = ValidationError("Request validation failed.", details=details)
    _log_error(request, error)
    return _render(error)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    path = request.url.path
    if exc.status_code == 404 and path.startswith(settings.API_PREFIX):
        error = NotFoundError("API endpoint not found.", code="ENDPOINT_NOT_FOUND", path=path)
    else:
        error = AppError(str(exc.detail), code="HTTP_ERROR")
        error.status_code = exc.status_code
    _log_error(request, error)
    return JSONResponse(status_code=error.status_code, content=error.to_payload(), headers=exc.headers)


async def handle_unexpected_error(request: Request, exc: Exception):
    error = InternalError("Internal server error.")
    _log_error(request, error, exc)
    return _render(error, exc)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
