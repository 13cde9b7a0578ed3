"""Timestamp-named working directories, one per input-preparation call."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .errors import StorageError
from .utils import epoch_millis, remove_tree_quietly

SESSION_PREFIX = "session-"
DEFAULT_RETENTION = 5


@dataclass(frozen=True, slots=True)
class Session:
    root: Path

    @property
    def assets_dir(self) -> Path:
        return self.root / "assets"

    @property
    def extracted_dir(self) -> Path:
        return self.root / "extracted"

    @property
    def document_path(self) -> Path:
        return self.root / "document.md"


class SessionManager:
    """Owns the shared ``sessions/`` directory under the cache root.

    Sessions are appended by :meth:`allocate_session` and reclaimed by :meth:`prune`;
    neither takes a lock, so concurrent pruning is best-effort.
    """

    def __init__(self, sessions_root: Path, retention: int = DEFAULT_RETENTION) -> None:
        self._root = sessions_root
        self._retention = retention

    @property
    def root(self) -> Path:
        return self._root

    def ensure_root(self) -> Path:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create sessions directory: {exc}") from exc
        return self._root

    def allocate_session(self) -> Session:
        self.ensure_root()
        millis = epoch_millis()
        while True:
            candidate = self._root / f"{SESSION_PREFIX}{millis}"
            try:
                candidate.mkdir()
            except FileExistsError:
                millis += 1
                continue
            except OSError as exc:
                raise StorageError(f"Failed to create session dir: {exc}") from exc
            break
        session = Session(root=candidate)
        try:
            session.assets_dir.mkdir()
        except OSError as exc:
            raise StorageError(f"Failed to create assets dir: {exc}") from exc
        return session

    def list_sessions(self) -> list[Path]:
        """Return session directories, newest first."""

        try:
            children = list(self._root.iterdir())
        except OSError:
            return []
        entries: list[tuple[float, Path]] = []
        for child in children:
            try:
                if not child.is_dir():
                    continue
                entries.append((child.stat().st_mtime, child))
            except OSError:
                continue
        entries.sort(key=lambda item: item[0], reverse=True)
        return [path for _, path in entries]

    def prune(self, retain: int | None = None) -> list[Path]:
        keep = self._retention if retain is None else retain
        keep = max(0, keep)
        removed: list[Path] = []
        for stale in self.list_sessions()[keep:]:
            if remove_tree_quietly(stale):
                removed.append(stale)
        return removed

    def clear(self) -> None:
        if not self._root.exists():
            return
        try:
            shutil.rmtree(self._root)
        except OSError as exc:
            raise StorageError(f"Failed to delete sessions: {exc}") from exc

    def owns(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self._root.resolve())
        except (OSError, ValueError):
            return False
        return True


__all__ = ["Session", "SessionManager", "SESSION_PREFIX", "DEFAULT_RETENTION"]
