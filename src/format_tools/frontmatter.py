"""Merge metadata into a Markdown document's leading ``---`` block."""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import InvalidMetadataError, StorageError
from .utils import atomic_write

FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(?P<block>.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)
SCALAR_TYPES = (str, bool, int, float, dt.date)


class _FrontMatterDumper(yaml.SafeDumper):
    """Indents block sequences under their key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> Any:
        return super().increase_indent(flow, False)


def split_front_matter(text: str) -> tuple[dict[str, Any] | None, str]:
    """Return the parsed leading block (``None`` when absent) and the body after it."""

    match = FRONT_MATTER_RE.match(text)
    if not match:
        return None, text
    block = match.group("block") or ""
    try:
        parsed = yaml.safe_load(block) if block.strip() else None
    except yaml.YAMLError:
        return None, text
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        # Not a key/value block: it stays part of the body.
        return None, text
    existing = dict(parsed)
    body = text[match.end():]
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return existing, body


def _supported(value: Any) -> bool:
    if isinstance(value, SCALAR_TYPES):
        return True
    if isinstance(value, (list, tuple)):
        return all(isinstance(item, SCALAR_TYPES) for item in value)
    return False


def render_front_matter(metadata: Mapping[str, Any]) -> str:
    entries = {
        str(key): list(value) if isinstance(value, tuple) else value
        for key, value in metadata.items()
        if _supported(value)
    }
    if not entries:
        return "---\n---\n"
    dumped = yaml.dump(
        entries,
        Dumper=_FrontMatterDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=2**31 - 1,
    )
    return f"---\n{dumped}---\n"


def merge_front_matter(text: str, metadata: Mapping[str, Any]) -> str:
    """New keys win over existing ones; key order of the existing block is kept."""

    if not isinstance(metadata, Mapping):
        raise InvalidMetadataError("Metadata must be a key/value mapping")
    if not metadata:
        return text
    existing, body = split_front_matter(text)
    merged: dict[str, Any] = dict(existing or {})
    for key, value in metadata.items():
        merged[str(key)] = value
    return f"{render_front_matter(merged)}\n{body}"


def inject_metadata(path: Path, metadata: Any, *, target: Path | None = None) -> Path:
    """Merge ``metadata`` into ``path`` and write the result to ``target`` (default: in place)."""

    if not isinstance(metadata, Mapping):
        raise InvalidMetadataError(
            f"Metadata must be a key/value mapping, got {type(metadata).__name__}"
        )
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Failed to read markdown: {exc}") from exc
    destination = target or path
    try:
        atomic_write(destination, merge_front_matter(text, metadata))
    except OSError as exc:
        raise StorageError(f"Failed to write metadata: {exc}") from exc
    return destination


__all__ = ["merge_front_matter", "split_front_matter", "render_front_matter", "inject_metadata"]
