"""Copy images referenced from Markdown into a session's asset directory."""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .utils import make_unique_name

IMAGE_RE = re.compile(r"!\[(?P<alt>[^\]]*)\]\((?P<path>[^)]+)\)")
REMOTE_PREFIXES = ("http://", "https://")
ASSETS_PREFIX = "assets"


@dataclass(slots=True)
class AssetRewrite:
    markdown: str
    copied: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def resolve_image_path(reference: str, base_dir: Path | None) -> Path | None:
    candidate = Path(reference)
    if candidate.is_absolute():
        return candidate
    if base_dir is not None:
        joined = base_dir / candidate
        if joined.exists():
            return joined
    return None


class AssetResolver:
    """Rewrites ``![alt](path)`` references to point at copied files under ``assets/``.

    Remote URLs are left untouched. A reference string seen earlier in the same
    document reuses the asset name assigned the first time, so each distinct
    source image is copied once.
    """

    def __init__(self, assets_dir: Path) -> None:
        self._assets_dir = assets_dir

    def rewrite(self, content: str, base_dir: Path | None = None) -> AssetRewrite:
        result = AssetRewrite(markdown=content)
        assigned: dict[str, str] = {}

        def _replace(match: re.Match[str]) -> str:
            original = match.group(0)
            alt = match.group("alt")
            reference = match.group("path").strip()

            if reference.startswith(REMOTE_PREFIXES):
                return original
            if reference in assigned:
                return f"![{alt}]({ASSETS_PREFIX}/{assigned[reference]})"

            source = resolve_image_path(reference, base_dir)
            if source is None or not source.is_file():
                return original

            unique_name = make_unique_name(source.name or "image", self._assets_dir)
            target = self._assets_dir / unique_name
            try:
                shutil.copyfile(source, target)
            except OSError as exc:
                result.warnings.append(f"IMAGE_COPY_FAILED: {reference}: {exc}")
                return original

            assigned[reference] = unique_name
            result.copied.append(target.resolve())
            return f"![{alt}]({ASSETS_PREFIX}/{unique_name})"

        result.markdown = IMAGE_RE.sub(_replace, content)
        return result


def rewrite_images(content: str, base_dir: Path | None, assets_dir: Path) -> AssetRewrite:
    return AssetResolver(assets_dir).rewrite(content, base_dir)


__all__ = ["AssetResolver", "AssetRewrite", "resolve_image_path", "rewrite_images"]
