from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class InputRequest(BaseModel):
    source_type: Literal["file", "text"]
    path: str | None = None
    content: str | None = None
    suggested_name: str | None = None
    selected_markdown: str | None = None


class StageRequest(BaseModel):
    template_id: str
    requires_privileged_access: bool | None = None
    access_key: str | None = None


class MetadataRequest(BaseModel):
    """User fields layered over a preset when no explicit metadata is sent."""

    preset: str | None = None
    template_id: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)


class ConvertRequest(BaseModel):
    input_file: str
    output_file: str | None = None
    source_dir: str | None = None
    source_name: str | None = None
    reference_doc: str | None = None
    metadata: Any = None
    metadata_file: str | None = None
    use_crossref: bool = False
    preset: MetadataRequest | None = None


__all__ = ["InputRequest", "StageRequest", "MetadataRequest", "ConvertRequest"]
