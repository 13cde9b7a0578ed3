from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ...core import FormatToolsService
from ..dependencies import get_service
from ..utils import run_sync

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("", summary="List session directories, newest first")
def list_sessions(service: FormatToolsService = Depends(get_service)) -> dict[str, Any]:
    return {"sessions": [str(path) for path in service.sessions.list_sessions()]}


@router.delete("", summary="Delete session directories")
async def delete_sessions(
    keep: int | None = Query(None, ge=0),
    service: FormatToolsService = Depends(get_service),
) -> dict[str, Any]:
    if keep is None:
        await run_sync(service.clear_sessions)
        return {"status": "cleared"}
    removed = await run_sync(service.prune_sessions, keep)
    return {"status": "pruned", "removed": len(removed)}


__all__ = ["router"]
