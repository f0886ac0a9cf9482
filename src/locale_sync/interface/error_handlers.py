"""Translate failures into ``{"status": "error", "message": ...}`` responses.

Domain errors are looked up along the exception's MRO, so a subclass
without its own entry inherits the status of its nearest mapped base.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from locale_sync.domain.exceptions import (
    GitHubRateLimitError,
    InvalidGitHubUrlError,
    InvalidLocaleError,
    LocalRepositoryNotFoundError,
    LocaleSyncError,
    RemoteQueryError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
    SyncInProgressError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[LocaleSyncError], int] = {
    InvalidGitHubUrlError: 422,
    InvalidLocaleError: 422,
    LocalRepositoryNotFoundError: 404,
    RepositoryNotFoundError: 404,
    RepositoryAccessDeniedError: 403,
    SyncInProgressError: 409,
    GitHubRateLimitError: 429,
    RemoteQueryError: 502,
}

UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again later."


def status_for(exc: LocaleSyncError) -> int:
    for klass in type(exc).__mro__:
        if klass in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[klass]
    return 500


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, LocaleSyncError)
    code = status_for(exc)
    if code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return error_response(code, str(exc))


async def _invalid_request(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return error_response(422, "; ".join(problems))


async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, UNEXPECTED_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the three handlers: domain errors, bad requests, everything else."""
    app.add_exception_handler(LocaleSyncError, _domain_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(Exception, _unexpected)
