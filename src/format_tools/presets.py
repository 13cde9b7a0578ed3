"""Document presets translated into conversion-engine metadata.

A :class:`TemplateConfig` describes the document in user terms (language
style, numbering, cross-reference behaviour). :func:`build_engine_metadata`
turns it into the flat mapping merged into the document's front matter, which
the crossref filter reads natively.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Literal, Mapping

from .errors import InvalidPresetError

LanguageStyle = Literal["zh-academic", "en-academic", "business"]
SectionNumbering = Literal["none", "basic", "from-h2", "multilevel"]
CrossReference = Literal["basic", "smart", "full-link"]
EquationNumbering = Literal["manual", "auto", "table"]
CodeBlock = Literal["normal", "listings"]

LANGUAGE_STYLES = ("zh-academic", "en-academic", "business")
SECTION_NUMBERINGS = ("none", "basic", "from-h2", "multilevel")
CROSS_REFERENCES = ("basic", "smart", "full-link")
EQUATION_NUMBERINGS = ("manual", "auto", "table")
CODE_BLOCKS = ("normal", "listings")

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_CAMEL_ALIASES = {
    "languageStyle": "language_style",
    "sectionNumbering": "section_numbering",
    "crossReference": "cross_reference",
    "equationNumbering": "equation_numbering",
    "codeBlock": "code_block",
}


@dataclass(slots=True)
class TemplateConfig:
    title: str = ""
    author: str | list[str] = ""
    date: str = ""
    subtitle: str = ""
    abstract: str = ""
    language_style: LanguageStyle = "zh-academic"
    section_numbering: SectionNumbering = "none"
    cross_reference: CrossReference = "basic"
    equation_numbering: EquationNumbering = "manual"
    code_block: CodeBlock | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateConfig":
        return cls(**normalize_config(data))


@dataclass(frozen=True, slots=True)
class ConfigPreset:
    id: str
    name: str
    description: str
    config: Mapping[str, Any]


DEFAULT_CONFIG: dict[str, Any] = asdict(TemplateConfig())

BUILTIN_PRESETS: tuple[ConfigPreset, ...] = (
    ConfigPreset("empty", "Empty", "All options use their defaults", {}),
    ConfigPreset(
        "zh-paper",
        "Chinese academic paper",
        "Journal submissions and theses in Chinese",
        {
            "language_style": "zh-academic",
            "section_numbering": "from-h2",
            "cross_reference": "basic",
            "equation_numbering": "auto",
        },
    ),
    ConfigPreset(
        "en-paper",
        "English academic paper",
        "International journal submissions",
        {
            "language_style": "en-academic",
            "section_numbering": "basic",
            "cross_reference": "basic",
            "equation_numbering": "auto",
        },
    ),
    ConfigPreset(
        "business",
        "Business report",
        "Company reports and project documents",
        {
            "language_style": "business",
            "section_numbering": "basic",
            "cross_reference": "full-link",
            "equation_numbering": "manual",
        },
    ),
    ConfigPreset(
        "technical",
        "Technical documentation",
        "Manuals and API documentation",
        {
            "language_style": "zh-academic",
            "section_numbering": "basic",
            "cross_reference": "full-link",
            "equation_numbering": "manual",
        },
    ),
)


def get_preset(preset_id: str) -> ConfigPreset:
    for preset in BUILTIN_PRESETS:
        if preset.id == preset_id:
            return preset
    raise InvalidPresetError(f"Unknown preset: {preset_id}", errors=[f"Unknown preset: {preset_id}"])


def normalize_config(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Accept snake_case or camelCase keys and drop unknown or empty ones."""

    if not data:
        return {}
    known = {field.name for field in fields(TemplateConfig)}
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name in known and value not in (None, ""):
            normalized[name] = value
    return normalized


def merge_configs(
    user_config: Mapping[str, Any] | None,
    template_preset: Mapping[str, Any] | None,
    default_config: Mapping[str, Any] | None = None,
) -> TemplateConfig:
    """Precedence: user > template preset > defaults."""

    merged: dict[str, Any] = {}
    merged.update(normalize_config(default_config if default_config is not None else DEFAULT_CONFIG))
    merged.update(normalize_config(template_preset))
    merged.update(normalize_config(user_config))
    return TemplateConfig.from_mapping(merged)


def resolve_preset_layer(default_preset: Any) -> dict[str, Any]:
    """A catalog ``default_preset`` is either a built-in preset id or a partial config."""

    if isinstance(default_preset, str) and default_preset:
        return dict(get_preset(default_preset).config)
    if isinstance(default_preset, Mapping):
        nested = default_preset.get("config")
        if isinstance(nested, Mapping):
            return normalize_config(nested)
        return normalize_config(default_preset)
    return {}


def validate_config(config: TemplateConfig) -> list[str]:
    errors: list[str] = []
    if config.date and not DATE_RE.match(config.date):
        errors.append("Date must use the YYYY-MM-DD format")
    checks = (
        ("language style", config.language_style, LANGUAGE_STYLES),
        ("section numbering", config.section_numbering, SECTION_NUMBERINGS),
        ("cross reference", config.cross_reference, CROSS_REFERENCES),
        ("equation numbering", config.equation_numbering, EQUATION_NUMBERINGS),
    )
    for label, value, allowed in checks:
        if value and value not in allowed:
            errors.append(f"Invalid {label}: {value}")
    if config.code_block is not None and config.code_block not in CODE_BLOCKS:
        errors.append(f"Invalid code block: {config.code_block}")
    return errors


def build_engine_metadata(config: TemplateConfig) -> dict[str, Any]:
    errors = validate_config(config)
    if errors:
        raise InvalidPresetError("; ".join(errors), errors=errors)

    metadata: dict[str, Any] = {}
    if config.title:
        metadata["title"] = config.title
        metadata["title-meta"] = config.title
    if config.author:
        metadata["author"] = config.author
        metadata["author-meta"] = (
            ", ".join(config.author) if isinstance(config.author, list) else config.author
        )
    if config.date:
        metadata["date"] = config.date
        metadata["date-meta"] = config.date
    if config.subtitle:
        metadata["subtitle"] = config.subtitle
    if config.abstract:
        metadata["abstract"] = config.abstract

    metadata.update(_language_style(config.language_style))
    metadata.update(_section_numbering(config.section_numbering))
    metadata.update(_cross_reference(config.cross_reference))
    metadata.update(_equation_numbering(config.equation_numbering))
    if config.code_block == "normal":
        metadata.update({"listings": False, "codeBlockCaptions": True})
    elif config.code_block == "listings":
        metadata.update({"listings": True, "codeBlockCaptions": True})

    metadata.update(
        {
            "rangeDelim": "-",
            "pairDelim": ", ",
            "lastDelim": " 和 " if config.language_style != "en-academic" else " and ",
            "refDelim": ", ",
            "chapDelim": ".",
        }
    )
    return metadata


def _language_style(style: str) -> dict[str, Any]:
    if style == "en-academic":
        return {
            "figureTitle": "Figure",
            "tableTitle": "Table",
            "listingTitle": "Listing",
            "figPrefix": ["fig.", "figs."],
            "tblPrefix": ["tbl.", "tbls."],
            "lstPrefix": ["lst.", "lsts."],
            "eqnPrefix": ["eq.", "eqns."],
            "secPrefix": ["sec.", "secs."],
            "titleDelim": ":",
        }
    chinese = {
        "figureTitle": "图",
        "tableTitle": "表",
        "listingTitle": "代码",
        "figPrefix": "图",
        "tblPrefix": "表",
        "lstPrefix": "代码",
        "eqnPrefix": "公式",
    }
    if style == "business":
        return {
            **chinese,
            "secPrefix": "章节",
            "titleDelim": " -",
            "linkReferences": True,
            "nameInLink": True,
        }
    return {**chinese, "secPrefix": "§", "titleDelim": ":"}


def _section_numbering(mode: str) -> dict[str, Any]:
    if mode == "none":
        return {"chapters": False, "numberSections": False}
    numbered: dict[str, Any] = {
        "chapters": True,
        "numberSections": True,
        "autoSectionLabels": True,
        "secHeaderDelim": [".", ""],
    }
    if mode == "basic":
        numbered["chaptersDepth"] = 1
    elif mode == "from-h2":
        numbered["chaptersDepth"] = 0
        numbered["sectionsDepth"] = 3
    elif mode == "multilevel":
        numbered["sectionsDepth"] = 4
    return numbered


def _cross_reference(mode: str) -> dict[str, Any]:
    if mode == "smart":
        return {"linkReferences": True, "cref": True, "nameInLink": False}
    if mode == "full-link":
        return {"linkReferences": True, "nameInLink": True, "cref": False}
    return {"linkReferences": False, "cref": False}


def _equation_numbering(mode: str) -> dict[str, Any]:
    if mode == "auto":
        return {"autoEqnLabels": True, "tableEqns": False}
    if mode == "table":
        return {"autoEqnLabels": True, "tableEqns": True}
    return {"autoEqnLabels": False, "tableEqns": False}


__all__ = [
    "TemplateConfig",
    "ConfigPreset",
    "BUILTIN_PRESETS",
    "DEFAULT_CONFIG",
    "get_preset",
    "merge_configs",
    "normalize_config",
    "resolve_preset_layer",
    "validate_config",
    "build_engine_metadata",
]
