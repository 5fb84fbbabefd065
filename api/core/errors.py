"""
Error taxonomy and the FastAPI handlers that turn it into JSON responses.

Services raise these; nothing below the router deals with status codes
directly. Every error renders as `{"message": ...}`, validation errors add an
`errors` list with one entry per violated rule.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StudioError(RuntimeError):
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(StudioError):
    status_code = 400

    def __init__(self, errors: list[dict[str, Any]], message: str = "Validation failed."):
        super().__init__(message)
        self.errors = errors

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class MalformedIdentifier(StudioError):
    status_code = 400

    def __init__(self, raw: Any, *, label: str = "id", status_code: int | None = None):
        super().__init__(f"Invalid {label} format: {raw}", status_code=status_code)
        self.raw = raw


class ReferenceNotFound(StudioError):
    status_code = 404


class NotFound(StudioError):
    status_code = 404


class NoValidFields(StudioError):
    status_code = 400

    def __init__(self, message: str = "No valid fields provided for update."):
        super().__init__(message)


class InvalidFilter(StudioError):
    # Malformed list filters have always surfaced as a failed fetch.
    status_code = 500


class StorageFailure(StudioError):
    status_code = 500


async def _studio_error_handler(_: Request, exc: StudioError) -> JSONResponse:
    if isinstance(exc, StorageFailure):
        logger.error("storage_failure message=%s", exc.message, exc_info=exc.__cause__ or exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "body",
            "message": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=ValidationError(errors).to_body())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudioError, _studio_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
