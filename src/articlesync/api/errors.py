"""Exception handlers — Map the error taxonomy onto HTTP responses.

Every error body has the shape ``{"error": "<message>"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from articlesync.errors import (
    ArticleSyncError,
    Forbidden,
    NotFoundError,
    StoreError,
    Unauthorized,
    ValidationError,
)
from articlesync.errors import IndexError as IndexBackendError

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
_STATUS_MAP: list[tuple[type[ArticleSyncError], int]] = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (Unauthorized, 401),
    (Forbidden, 403),
    (StoreError, 503),
    (IndexBackendError, 502),
]


def status_for(error: ArticleSyncError) -> int:
    """HTTP status code for a taxonomy error (500 if unmapped)."""
    for error_class, status_code in _STATUS_MAP:
        if isinstance(error, error_class):
            return status_code
    return 500


async def _handle_domain_error(request: Request, exc: ArticleSyncError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"error": str(exc)}, headers=headers)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'][1:]) or err['loc'][0]}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": problems})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the taxonomy and request-validation handlers on *app*."""
    app.add_exception_handler(ArticleSyncError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
