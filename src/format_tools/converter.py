from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Mapping

from .engine import EngineLocator
from .errors import EngineFailedError, InvalidMetadataError, NotFoundError, StorageError
from .frontmatter import inject_metadata
from .models import ConversionResult, ConvertOptions
from .sessions import SessionManager
from .templates import TemplateStager

DEFAULT_STEM = "document"
DEFAULT_EXTENSION = "docx"


def make_unique_with_ext(directory: Path, stem: str, ext: str, suffix: str) -> Path:
    counter = 0
    while True:
        marker = suffix if counter == 0 else f"{suffix}_{counter}"
        candidate = directory / f"{stem}{marker}.{ext}"
        if not candidate.exists():
            return candidate
        counter += 1


def resolve_output_path(options: ConvertOptions, suffix: str) -> Path:
    """Pick a collision-free output path for ``options``.

    The directory defaults to ``source_dir`` (when it exists) or the input's
    parent; the stem comes from ``source_name`` or the input file. An explicit
    ``output_file`` overrides stem, extension and directory. The product
    suffix is always appended so an earlier output is never overwritten.
    """

    input_path = Path(options.input_file)
    default_dir = input_path.parent
    if options.source_dir is not None and Path(options.source_dir).exists():
        target_dir = Path(options.source_dir)
    else:
        target_dir = default_dir

    base_stem = None
    if options.source_name:
        base_stem = Path(options.source_name).stem or None
    base_stem = base_stem or input_path.stem or DEFAULT_STEM

    if options.output_file is not None:
        provided = Path(options.output_file)
        stem = provided.stem or base_stem
        ext = provided.suffix.lstrip(".") or DEFAULT_EXTENSION
        directory = provided.parent if provided.parent != Path(".") else target_dir
        return make_unique_with_ext(directory, stem, ext, suffix)

    return make_unique_with_ext(target_dir, base_stem, DEFAULT_EXTENSION, suffix)


class ConversionOrchestrator:
    """Runs the external engine for one request and tidies up afterwards."""

    def __init__(
        self,
        locator: EngineLocator,
        sessions: SessionManager,
        stager: TemplateStager | None = None,
        *,
        output_suffix: str = "_format-tools",
    ) -> None:
        self._locator = locator
        self._sessions = sessions
        self._stager = stager
        self._output_suffix = output_suffix

    def build_arguments(
        self,
        engine: Path,
        engine_input: Path,
        output_path: Path,
        options: ConvertOptions,
    ) -> list[str]:
        arguments = [str(engine), str(engine_input), "-o", str(output_path)]
        if options.reference_doc is not None:
            arguments.extend(["--reference-doc", str(Path(options.reference_doc).resolve())])
        if options.metadata_file is not None:
            arguments.extend(["--metadata-file", str(Path(options.metadata_file).resolve())])
        if options.use_crossref and self._locator.is_crossref_installed():
            arguments.extend(["-F", str(self._locator.crossref_path)])
        return arguments

    def convert(self, options: ConvertOptions) -> ConversionResult:
        engine = self._locator.require_engine()
        input_path = Path(options.input_file).resolve()
        if not input_path.is_file():
            raise NotFoundError(f"Input file not found: {input_path}")

        engine_input = self._apply_metadata(input_path, options)

        output_path = resolve_output_path(options, self._output_suffix).resolve()
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create output directory: {exc}") from exc

        arguments = self.build_arguments(engine, engine_input, output_path, options)
        try:
            completed = subprocess.run(
                arguments,
                cwd=input_path.parent,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise EngineFailedError(f"Failed to execute conversion engine: {exc}") from exc

        if completed.returncode != 0:
            raise EngineFailedError(
                f"Conversion failed: {completed.stderr.strip()}",
                stderr=completed.stderr,
            )

        cleaned = False
        if options.reference_doc is not None and self._stager is not None:
            cleaned = self._stager.discard(Path(options.reference_doc))
        pruned = self._sessions.prune()
        return ConversionResult(
            output_path=output_path,
            arguments=arguments,
            stderr=completed.stderr,
            cleaned_reference_doc=cleaned,
            pruned_sessions=pruned,
        )

    def _apply_metadata(self, input_path: Path, options: ConvertOptions) -> Path:
        if options.metadata is None:
            return input_path
        if not isinstance(options.metadata, Mapping):
            raise InvalidMetadataError(
                f"Metadata must be a key/value mapping, got {type(options.metadata).__name__}"
            )
        if self._sessions.owns(input_path):
            return inject_metadata(input_path, options.metadata)
        # Files outside the session area belong to the user: merge into a working copy.
        session = self._sessions.allocate_session()
        return inject_metadata(input_path, options.metadata, target=session.document_path)


__all__ = ["ConversionOrchestrator", "resolve_output_path", "make_unique_with_ext"]
