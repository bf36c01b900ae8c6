"""Exception handlers producing the uniform error envelope `{code, message, status, errors?}`."""

import logging
from typing import Iterable, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from executask.errors import AppError, BadRequestError, FieldError, InternalServerError

logger = logging.getLogger(__name__)

# Leading `loc` entries that name where the value came from rather than which field it is.
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
}


def field_errors(errors: Iterable[dict]) -> List[FieldError]:
    """Flatten pydantic error dicts into one FieldError per offending field."""
    result = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        result.append(FieldError(field=".".join(loc) or "body", error=error.get("msg", "invalid value")))
    return result


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status, content=exc.to_dict(), headers=exc.headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(BadRequestError(
        "Validation failed",
        code="VALIDATION_ERROR",
        errors=field_errors(exc.errors()),
    ))


async def model_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(BadRequestError(
        "Validation failed",
        code="VALIDATION_ERROR",
        errors=field_errors(exc.errors()),
    ))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = {
        "code": _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR"),
        "message": str(exc.detail),
        "status": exc.status_code,
    }
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}")
    return error_response(InternalServerError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, model_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
