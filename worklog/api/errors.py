"""
api/errors.py — Standard error response shape and the handlers that produce it.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import WorklogError

logger = logging.getLogger(__name__)


def error_response(
    code: str,
    message: str,
    http_status: int = 400,
    details: Optional[list] = None,
) -> JSONResponse:
    body: dict[str, Any] = {"error": code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=http_status, content=body)


# ── Exception handlers (registered in app.py) ─────────────────────────────────

async def worklog_error_handler(request: Request, exc: WorklogError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.code, exc.message, exc.http_status, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        details.append(f"{field}: {err.get('msg')}")
    return error_response("VALIDATION_ERROR", "Validation failed", 400, details)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("INTERNAL_ERROR", "An unexpected error occurred.", 500)
