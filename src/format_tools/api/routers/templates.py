from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ...core import FormatToolsService
from ..dependencies import get_service
from ..schemas import StageRequest
from ..utils import run_sync

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


@router.get("", summary="List catalog templates")
async def list_templates(service: FormatToolsService = Depends(get_service)) -> dict[str, Any]:
    catalog = await run_sync(service.list_templates)
    return catalog.to_payload()


@router.post("/stage", summary="Stage a template as a runtime reference document")
async def stage_template(
    request: StageRequest,
    service: FormatToolsService = Depends(get_service),
) -> dict[str, str]:
    info = await run_sync(
        service.stage_template,
        request.template_id,
        request.requires_privileged_access,
        request.access_key,
    )
    return info.to_payload()


__all__ = ["router"]
