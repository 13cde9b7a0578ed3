from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ...core import FormatToolsService
from ...models import FileSource, InputSource, TextSource
from ..dependencies import get_service
from ..schemas import InputRequest
from ..utils import run_sync

router = APIRouter(prefix="/api/v1", tags=["inputs"])


@router.post("/inputs", summary="Prepare a Markdown input on disk or pasted text")
async def prepare_input(
    request: InputRequest,
    service: FormatToolsService = Depends(get_service),
) -> dict[str, Any]:
    source: InputSource
    if request.source_type == "text":
        if request.content is None:
            raise HTTPException(status_code=400, detail="CONTENT_REQUIRED")
        source = TextSource(content=request.content, suggested_name=request.suggested_name)
    else:
        if not request.path:
            raise HTTPException(status_code=400, detail="PATH_REQUIRED")
        source = FileSource(path=Path(request.path), selected_markdown=request.selected_markdown)
    prepared = await run_sync(service.prepare_input, source)
    return prepared.to_payload()


@router.post("/inputs/upload", summary="Prepare an uploaded Markdown file or archive")
async def upload_input(
    file: UploadFile = File(...),
    selected_markdown: str | None = Form(None),
    service: FormatToolsService = Depends(get_service),
) -> dict[str, Any]:
    filename = Path(file.filename or "upload.md").name
    payload = await file.read()
    if not payload:
        raise HTTPException(status_code=400, detail="EMPTY_FILE")
    # Compound suffixes such as .tar.gz must survive.
    suffix = "".join(Path(filename).suffixes)
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp:
        tmp.write(payload)
        tmp.flush()
        tmp_path = Path(tmp.name)
    try:
        prepared = await run_sync(
            service.prepare_input,
            FileSource(path=tmp_path, original_name=filename, selected_markdown=selected_markdown),
        )
    finally:
        tmp_path.unlink(missing_ok=True)
    return prepared.to_payload()


__all__ = ["router"]
