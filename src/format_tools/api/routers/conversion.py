from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends

from ...core import FormatToolsService
from ...models import ConvertOptions
from ..dependencies import get_service
from ..schemas import ConvertRequest
from ..utils import run_sync

router = APIRouter(prefix="/api/v1", tags=["conversion"])


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


@router.post("/convert", summary="Convert a prepared Markdown file")
async def convert_document(
    request: ConvertRequest,
    service: FormatToolsService = Depends(get_service),
) -> dict[str, Any]:
    metadata = request.metadata
    if metadata is None and request.preset is not None:
        metadata = await run_sync(
            service.build_metadata,
            request.preset.config,
            preset=request.preset.preset,
            template_id=request.preset.template_id,
        )
    options = ConvertOptions(
        input_file=Path(request.input_file),
        output_file=_optional_path(request.output_file),
        source_dir=_optional_path(request.source_dir),
        source_name=request.source_name,
        reference_doc=_optional_path(request.reference_doc),
        metadata=metadata,
        metadata_file=_optional_path(request.metadata_file),
        use_crossref=request.use_crossref,
    )
    result = await run_sync(service.convert, options)
    return {
        "output_path": str(result.output_path),
        "cleaned_reference_doc": result.cleaned_reference_doc,
        "pruned_sessions": len(result.pruned_sessions),
    }


__all__ = ["router"]
