from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ...core import FormatToolsService
from ..dependencies import get_service
from ..utils import run_sync

router = APIRouter(prefix="/api/v1", tags=["engine"])


@router.get("/engine", summary="Report conversion engine installation")
async def engine_status(service: FormatToolsService = Depends(get_service)) -> dict[str, Any]:
    status = await run_sync(service.engine_status)
    return status.to_payload()


__all__ = ["router"]
