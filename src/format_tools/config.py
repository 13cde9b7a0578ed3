from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .settings import DEFAULT_CONFIG_PATH, Settings

PACKAGE_TEMPLATES_DIR = Path(__file__).resolve().parent / "resources" / "templates"


def _default_cache_root() -> Path:
    return Path.home() / ".cache" / "format-tools"


def _default_install_dir() -> Path:
    return Path.home() / ".local" / "share" / "format-tools" / "pandoc"


def _default_search_paths() -> tuple[Path, ...]:
    return (Path("resources") / "templates", PACKAGE_TEMPLATES_DIR)


@dataclass(slots=True)
class RuntimeConfig:
    cache_root: Path = field(default_factory=_default_cache_root)
    install_dir: Path = field(default_factory=_default_install_dir)
    session_retention: int = 5
    output_suffix: str = "_format-tools"
    log_file: str = "log.jsonl"
    enable_local_api: bool = False

    @property
    def sessions_dir(self) -> Path:
        return self.cache_root / "sessions"

    @property
    def runtime_templates_dir(self) -> Path:
        return self.cache_root / "templates" / "runtime"

    @property
    def log_path(self) -> Path:
        return self.cache_root / self.log_file


@dataclass(slots=True)
class TemplatesConfig:
    search_paths: tuple[Path, ...] = field(default_factory=_default_search_paths)
    catalog_file: str = "templates.json"


@dataclass(slots=True)
class EngineConfig:
    executable: str = "pandoc"
    crossref_executable: str = "pandoc-crossref"


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    api: APIConfig = field(default_factory=APIConfig)

    @property
    def engine_path(self) -> Path:
        return self.runtime.install_dir / _executable_name(self.engine.executable)

    @property
    def crossref_path(self) -> Path:
        return self.runtime.install_dir / _executable_name(self.engine.crossref_executable)


def _executable_name(name: str) -> str:
    if os.name == "nt" and not name.lower().endswith(".exe"):
        return f"{name}.exe"
    return name


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _expand(value: object) -> Path:
    return Path(str(value)).expanduser()


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    defaults = RuntimeConfig()
    return RuntimeConfig(
        cache_root=_expand(data["cache_root"]) if "cache_root" in data else defaults.cache_root,
        install_dir=_expand(data["install_dir"]) if "install_dir" in data else defaults.install_dir,
        session_retention=max(0, int(data.get("session_retention", 5))),
        output_suffix=str(data.get("output_suffix", "_format-tools")),
        log_file=str(data.get("log_file", "log.jsonl")),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _tuple_of_paths(value: object | None, default: Iterable[Path]) -> tuple[Path, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, str):
        return (_expand(value),)
    if isinstance(value, Iterable):
        return tuple(_expand(item) for item in value)
    raise TypeError(f"Unsupported search_paths configuration: {value!r}")


def _build_templates(data: Mapping[str, object] | None) -> TemplatesConfig:
    if not data:
        return TemplatesConfig()
    return TemplatesConfig(
        search_paths=_tuple_of_paths(data.get("search_paths"), _default_search_paths()),
        catalog_file=str(data.get("catalog_file", "templates.json")),
    )


def _build_engine(data: Mapping[str, object] | None) -> EngineConfig:
    if not data:
        return EngineConfig()
    return EngineConfig(
        executable=str(data.get("executable", "pandoc")),
        crossref_executable=str(data.get("crossref_executable", "pandoc-crossref")),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name)
    return value if isinstance(value, Mapping) else None


def load_config(path: Path | None = None) -> AppConfig:
    path = path or DEFAULT_CONFIG_PATH
    raw = _read_toml(path)
    return AppConfig(
        runtime=_build_runtime(_section(raw, "runtime")),
        templates=_build_templates(_section(raw, "templates")),
        engine=_build_engine(_section(raw, "engine")),
        api=_build_api(_section(raw, "api")),
    )


def apply_settings(config: AppConfig, settings: Settings) -> AppConfig:
    """Overlay environment settings on top of file configuration."""

    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    if settings.cache_root is not None:
        config.runtime.cache_root = settings.cache_root.expanduser()
    if settings.install_dir is not None:
        config.runtime.install_dir = settings.install_dir.expanduser()
    return config


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "cache_root": str(config.runtime.cache_root),
            "install_dir": str(config.runtime.install_dir),
            "session_retention": config.runtime.session_retention,
            "output_suffix": config.runtime.output_suffix,
            "log_file": config.runtime.log_file,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "templates": {
            "search_paths": [str(path) for path in config.templates.search_paths],
            "catalog_file": config.templates.catalog_file,
        },
        "engine": {
            "executable": config.engine.executable,
            "crossref_executable": config.engine.crossref_executable,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


__all__ = [
    "AppConfig",
    "RuntimeConfig",
    "TemplatesConfig",
    "EngineConfig",
    "APIConfig",
    "PACKAGE_TEMPLATES_DIR",
    "load_config",
    "apply_settings",
    "dump_config",
]
