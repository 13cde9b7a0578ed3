from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from .config import AppConfig
from .errors import EngineFailedError, EngineMissingError


@dataclass(frozen=True, slots=True)
class EngineStatus:
    engine_path: Path
    crossref_path: Path
    engine_installed: bool
    crossref_installed: bool
    version: str | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "engine_path": str(self.engine_path),
            "crossref_path": str(self.crossref_path),
            "engine_installed": self.engine_installed,
            "crossref_installed": self.crossref_installed,
            "version": self.version,
        }


class EngineLocator:
    """Knows where the conversion engine and its crossref filter are installed."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    def engine_path(self) -> Path:
        return self._config.engine_path

    @property
    def crossref_path(self) -> Path:
        return self._config.crossref_path

    def is_engine_installed(self) -> bool:
        return self.engine_path.is_file()

    def is_crossref_installed(self) -> bool:
        return self.crossref_path.is_file()

    def require_engine(self) -> Path:
        if not self.is_engine_installed():
            raise EngineMissingError(
                f"Conversion engine not installed at {self.engine_path}. Please install it first."
            )
        return self.engine_path

    def engine_version(self) -> str:
        engine = self.require_engine()
        try:
            completed = subprocess.run(
                [str(engine), "--version"],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise EngineFailedError(f"Failed to get version: {exc}") from exc
        if completed.returncode != 0:
            raise EngineFailedError("Failed to get engine version", stderr=completed.stderr)
        lines = completed.stdout.splitlines()
        return lines[0].strip() if lines else "Unknown"

    def status(self) -> EngineStatus:
        version: str | None = None
        if self.is_engine_installed():
            try:
                version = self.engine_version()
            except EngineFailedError:
                version = None
        return EngineStatus(
            engine_path=self.engine_path,
            crossref_path=self.crossref_path,
            engine_installed=self.is_engine_installed(),
            crossref_installed=self.is_crossref_installed(),
            version=version,
        )


__all__ = ["EngineLocator", "EngineStatus"]
