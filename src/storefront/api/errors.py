"""Exception handlers mapping domain errors onto the response envelope."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from storefront.api.responses import failure
from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)

_REQUEST_LOCATIONS = {"body", "query", "path", "header"}


def field_errors(messages) -> list[dict]:
    errors = []
    for field, field_messages in (messages or {}).items():
        if not isinstance(field_messages, (list, tuple)):
            field_messages = [field_messages]
        errors.extend({"field": field, "message": str(message)} for message in field_messages)
    return errors


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.code, message=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(exc.message, exc.code, field_errors(exc.messages)),
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    errors = field_errors(exc.messages)
    message = errors[0]["message"] if errors else "Validation failed"
    return JSONResponse(status_code=400, content=failure(message, "validation_failed", errors))


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    message = exc.args[0] if exc.args and isinstance(exc.args[0], str) else "Resource not found"
    return JSONResponse(status_code=404, content=failure(message, "not_found"))


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Write conflict", path=request.url.path)
    return JSONResponse(
        status_code=409,
        content=failure("The resource was changed by another request, please retry", "conflict"),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part not in _REQUEST_LOCATIONS),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content=failure("Invalid request", "validation_failed", errors))


async def not_implemented_handler(request: Request, exc: NotImplementedError) -> JSONResponse:
    return JSONResponse(status_code=501, content=failure(str(exc) or "Not implemented", "not_implemented"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content=failure("Internal server error", "internal_error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotImplementedError, not_implemented_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
