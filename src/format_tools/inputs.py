from __future__ import annotations

import shutil
from pathlib import Path

from .archives import extract_archive, is_archive
from .assets import rewrite_images
from .errors import NotFoundError, StorageError
from .models import FileSource, InputSource, PreparedInput, TextSource
from .sessions import Session, SessionManager

MARKDOWN_EXTENSIONS = frozenset({"md", "markdown", "txt"})


def collect_markdown_files(root: Path) -> list[str]:
    """Relative POSIX paths of every Markdown-like file under ``root``, sorted."""

    results: list[str] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        extension = path.suffix.lower().lstrip(".")
        if extension in MARKDOWN_EXTENSIONS:
            results.append(path.relative_to(root).as_posix())
    results.sort()
    return results


def select_markdown(candidates: list[str], selected: str | None) -> str:
    if selected is not None:
        matches = [candidate for candidate in candidates if candidate == selected]
        if len(matches) == 1:
            return matches[0]
    if not candidates:
        raise NotFoundError("No markdown file found in archive")
    return candidates[0]


class InputNormalizer:
    """Turns a file, archive or pasted text into ``document.md`` inside a fresh session."""

    def __init__(self, sessions: SessionManager) -> None:
        self._sessions = sessions

    def prepare(self, source: InputSource) -> PreparedInput:
        match source:
            case TextSource():
                return self._prepare_text(source)
            case FileSource():
                return self._prepare_file(source)
            case _:
                raise TypeError(f"Unsupported input source: {source!r}")

    def _prepare_text(self, source: TextSource) -> PreparedInput:
        session = self._sessions.allocate_session()
        rewrite = rewrite_images(source.content, None, session.assets_dir)
        _write_text(session.document_path, rewrite.markdown, "Failed to write markdown")
        return PreparedInput(
            markdown_path=session.document_path,
            assets_dir=session.assets_dir,
            image_count=len(rewrite.copied),
            copied_images=rewrite.copied,
            markdown_files=[str(session.document_path)],
            source_name=source.suggested_name,
            source_dir=None,
            warnings=rewrite.warnings,
        )

    def _prepare_file(self, source: FileSource) -> PreparedInput:
        input_path = Path(source.path)
        if not input_path.exists():
            raise NotFoundError(f"File not found: {input_path}")
        display_name = source.original_name or input_path.name

        session = self._sessions.allocate_session()
        if is_archive(display_name):
            base_dir, markdown_files = self._stage_archive(
                input_path, display_name, session, source.selected_markdown
            )
        else:
            _copy_file(input_path, session.document_path)
            base_dir = input_path.parent
            markdown_files = [str(session.document_path)]

        content = _read_text(session.document_path)
        rewrite = rewrite_images(content, base_dir, session.assets_dir)
        _write_text(session.document_path, rewrite.markdown, "Failed to write processed markdown")

        return PreparedInput(
            markdown_path=session.document_path,
            assets_dir=session.assets_dir,
            image_count=len(rewrite.copied),
            copied_images=rewrite.copied,
            markdown_files=markdown_files,
            source_name=display_name,
            source_dir=input_path.parent.resolve(),
            warnings=rewrite.warnings,
        )

    def _stage_archive(
        self,
        archive: Path,
        display_name: str,
        session: Session,
        selected_markdown: str | None,
    ) -> tuple[Path, list[str]]:
        extract_dir = session.extracted_dir
        try:
            extract_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create extract dir: {exc}") from exc
        extract_archive(archive, extract_dir, name=display_name)

        markdown_files = collect_markdown_files(extract_dir)
        selected = select_markdown(markdown_files, selected_markdown)
        selected_path = extract_dir / selected
        _copy_file(selected_path, session.document_path)
        return selected_path.parent, markdown_files


def _copy_file(source: Path, target: Path) -> None:
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        raise StorageError(f"Failed to copy markdown: {exc}") from exc


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Failed to read markdown: {exc}") from exc


def _write_text(path: Path, content: str, message: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"{message}: {exc}") from exc


__all__ = ["InputNormalizer", "collect_markdown_files", "select_markdown", "MARKDOWN_EXTENSIONS"]
