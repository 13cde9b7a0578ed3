from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Callable, Mapping, TypeVar

from .config import AppConfig
from .converter import ConversionOrchestrator
from .engine import EngineLocator, EngineStatus
from .errors import FormatToolsError
from .inputs import InputNormalizer
from .logging import RunLogEntry, RunLogger
from .models import (
    ConversionResult,
    ConvertOptions,
    InputSource,
    PreparedInput,
    TemplateCatalog,
    TemplateInfo,
    TextSource,
)
from .presets import build_engine_metadata, get_preset, merge_configs, resolve_preset_layer
from .sessions import SessionManager
from .settings import get_settings
from .templates import TemplateStager

T = TypeVar("T")


class FormatToolsService:
    """Entry points used by the CLI and the local API."""

    def __init__(self, config: AppConfig, *, template_key: str | None = None) -> None:
        self._config = config
        runtime = config.runtime
        if template_key is None:
            template_key = get_settings().template_key
        self.sessions = SessionManager(runtime.sessions_dir, runtime.session_retention)
        self.stager = TemplateStager(
            config.templates.search_paths,
            runtime.runtime_templates_dir,
            catalog_file=config.templates.catalog_file,
            default_key=template_key,
        )
        self.locator = EngineLocator(config)
        self.normalizer = InputNormalizer(self.sessions)
        self.orchestrator = ConversionOrchestrator(
            self.locator,
            self.sessions,
            self.stager,
            output_suffix=runtime.output_suffix,
        )
        self.logger = RunLogger(runtime.log_path)

    @property
    def config(self) -> AppConfig:
        return self._config

    def prepare_input(self, source: InputSource) -> PreparedInput:
        label = source.suggested_name if isinstance(source, TextSource) else str(source.path)
        return self._run(
            "prepare",
            label,
            lambda: self.normalizer.prepare(source),
            output=lambda result: str(result.markdown_path),
            warnings=lambda result: result.warnings,
        )

    def stage_template(
        self,
        template_id: str,
        requires_privileged_access: bool | None = None,
        access_key: str | None = None,
    ) -> TemplateInfo:
        return self._run(
            "stage_template",
            template_id,
            lambda: self.stager.stage(template_id, requires_privileged_access, access_key),
            output=lambda info: str(info.reference_doc),
        )

    def list_templates(self) -> TemplateCatalog:
        return self._run(
            "list_templates",
            None,
            self.stager.load_catalog,
            output=lambda catalog: f"{len(catalog.templates)} templates",
        )

    def build_metadata(
        self,
        user_config: Mapping[str, Any] | None = None,
        *,
        preset: str | None = None,
        template_id: str | None = None,
    ) -> dict[str, Any]:
        """Resolve user fields over a preset (explicit, or the template's default) over defaults."""

        preset_layer: dict[str, Any] = {}
        if preset:
            preset_layer = dict(get_preset(preset).config)
        elif template_id:
            meta = self.stager.load_catalog().get(template_id)
            if meta is not None:
                preset_layer = resolve_preset_layer(meta.default_preset)
        return build_engine_metadata(merge_configs(user_config, preset_layer))

    def convert(self, options: ConvertOptions) -> ConversionResult:
        return self._run(
            "convert",
            str(options.input_file),
            lambda: self.orchestrator.convert(options),
            output=lambda result: str(result.output_path),
        )

    def clear_sessions(self) -> None:
        self._run("clear_sessions", str(self.sessions.root), self.sessions.clear)

    def prune_sessions(self, retain: int | None = None) -> list[Path]:
        return self.sessions.prune(retain)

    def engine_status(self) -> EngineStatus:
        return self.locator.status()

    def _run(
        self,
        operation: str,
        source: str | None,
        action: Callable[[], T],
        *,
        output: Callable[[T], str] | None = None,
        warnings: Callable[[T], list[str]] | None = None,
    ) -> T:
        start = time.perf_counter()
        try:
            result = action()
        except FormatToolsError as exc:
            self._log(
                RunLogEntry(
                    operation=operation,
                    status="failure",
                    source=source,
                    error_code=exc.code,
                    error_message=str(exc),
                    elapsed_ms=(time.perf_counter() - start) * 1000,
                )
            )
            raise
        self._log(
            RunLogEntry(
                operation=operation,
                status="success",
                source=source,
                output=output(result) if output else None,
                warnings=warnings(result) if warnings else [],
                elapsed_ms=(time.perf_counter() - start) * 1000,
            )
        )
        return result

    def _log(self, entry: RunLogEntry) -> None:
        try:
            self.logger.append(entry)
        except OSError:
            # The run log is diagnostic only.
            pass


__all__ = ["FormatToolsService"]
