"""Exception handlers that turn domain errors into the JSON error envelope.

The status code for a domain error is looked up along its MRO, so a
subclass without its own entry inherits its parent's code.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from project_reviewer.domain.exceptions import (
    ContentExtractionError,
    EmptyProjectError,
    InvalidProjectPathError,
    LlmError,
    ProjectReviewerError,
    StructureUnavailableError,
)
from project_reviewer.interface.schemas import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[ProjectReviewerError], int] = {
    InvalidProjectPathError: 422,
    EmptyProjectError: 422,
    StructureUnavailableError: 500,
    LlmError: 502,
    ContentExtractionError: 500,
    ProjectReviewerError: 500,
}


def status_for(exc: ProjectReviewerError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProjectReviewerError)
    async def domain_handler(request: Request, exc: ProjectReviewerError) -> JSONResponse:
        code = status_for(exc)
        log = logger.error if code >= 500 else logger.warning
        log("%s on %s: %s", type(exc).__name__, request.url.path, exc)
        return _envelope(code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
            for err in exc.errors()
        ]
        return _envelope(422, "; ".join(problems))

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _envelope(500, "An unexpected error occurred. Please try again later.")
