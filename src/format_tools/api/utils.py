"""Execution helpers bridging synchronous services into async contexts."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import HTTPException

from ..errors import FormatToolsError

T = TypeVar("T")

STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "IO_ERROR": 500,
    "ARCHIVE_ERROR": 400,
    "DECRYPTION_FAILED": 400,
    "ENGINE_MISSING": 503,
    "ENGINE_FAILED": 500,
    "INVALID_METADATA": 422,
    "INVALID_PRESET": 422,
}


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Execute *func* in a worker thread, mapping domain errors to HTTP errors."""

    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except FormatToolsError as exc:
        raise to_http_error(exc) from exc


def to_http_error(exc: FormatToolsError) -> HTTPException:
    detail: dict[str, Any] = {"code": exc.code, "message": str(exc)}
    stderr = getattr(exc, "stderr", "")
    if stderr:
        detail["stderr"] = stderr
    errors = getattr(exc, "errors", None)
    if errors:
        detail["errors"] = errors
    return HTTPException(status_code=STATUS_BY_CODE.get(exc.code, 500), detail=detail)


__all__ = ["run_sync", "to_http_error", "STATUS_BY_CODE"]
