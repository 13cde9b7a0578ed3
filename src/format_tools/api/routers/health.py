from __future__ import annotations

from fastapi import APIRouter, Depends

from ...core import FormatToolsService
from ..dependencies import get_service

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
def health(service: FormatToolsService = Depends(get_service)) -> dict[str, object]:
    return {
        "status": "ok",
        "engine_installed": service.locator.is_engine_installed(),
        "sessions": len(service.sessions.list_sessions()),
    }


__all__ = ["router"]
