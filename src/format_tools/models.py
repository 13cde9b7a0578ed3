"""Domain models shared by the preparation, staging and conversion steps."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping, TypeAlias


@dataclass(frozen=True, slots=True)
class FileSource:
    """A Markdown/text file or an archive on disk."""

    path: Path
    original_name: str | None = None
    selected_markdown: str | None = None


@dataclass(frozen=True, slots=True)
class TextSource:
    """Markdown pasted directly by the user."""

    content: str
    suggested_name: str | None = None


InputSource: TypeAlias = FileSource | TextSource


@dataclass(slots=True)
class PreparedInput:
    markdown_path: Path
    assets_dir: Path
    image_count: int
    copied_images: list[Path] = field(default_factory=list)
    markdown_files: list[str] = field(default_factory=list)
    source_name: str | None = None
    source_dir: Path | None = None
    warnings: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "markdown_path": str(self.markdown_path),
            "assets_dir": str(self.assets_dir),
            "image_count": self.image_count,
            "copied_images": [str(path) for path in self.copied_images],
            "markdown_files": list(self.markdown_files),
            "source_name": self.source_name,
            "source_dir": str(self.source_dir) if self.source_dir else None,
            "warnings": list(self.warnings),
        }


@dataclass(slots=True)
class ConvertOptions:
    """A single conversion request."""

    input_file: Path
    output_file: Path | None = None
    source_dir: Path | None = None
    source_name: str | None = None
    reference_doc: Path | None = None
    metadata: Mapping[str, Any] | None = None
    metadata_file: Path | None = None
    use_crossref: bool = False


@dataclass(frozen=True, slots=True)
class TemplateResource:
    path: Path
    encrypted: bool


@dataclass(frozen=True, slots=True)
class TemplateInfo:
    reference_doc: Path
    protected_path: Path

    def to_payload(self) -> dict[str, str]:
        return {"reference_doc": str(self.reference_doc), "protected_path": str(self.protected_path)}


@dataclass(frozen=True, slots=True)
class TemplateMeta:
    id: str
    name: str
    description: str
    category: str = ""
    member: bool = False
    default_preset: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TemplateMeta":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            member=bool(data.get("member", False)),
            default_preset=data.get("defaultPreset", data.get("default_preset")),
        )

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class TemplateCatalog:
    templates: list[TemplateMeta] = field(default_factory=list)

    @property
    def has_premium(self) -> bool:
        return any(template.member for template in self.templates)

    def get(self, template_id: str) -> TemplateMeta | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def to_payload(self) -> dict[str, Any]:
        return {
            "templates": [template.to_payload() for template in self.templates],
            "has_premium": self.has_premium,
        }


@dataclass(slots=True)
class ConversionResult:
    output_path: Path
    arguments: list[str]
    stderr: str = ""
    cleaned_reference_doc: bool = False
    pruned_sessions: list[Path] = field(default_factory=list)


__all__ = [
    "FileSource",
    "TextSource",
    "InputSource",
    "PreparedInput",
    "ConvertOptions",
    "TemplateResource",
    "TemplateInfo",
    "TemplateMeta",
    "TemplateCatalog",
    "ConversionResult",
]
