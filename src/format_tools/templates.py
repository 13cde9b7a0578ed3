"""Template catalog and one-shot staging of reference documents."""

from __future__ import annotations

import json
import re
import shutil
import threading
from pathlib import Path
from typing import Sequence

from .crypto import decrypt_bytes
from .errors import NotFoundError, StorageError
from .models import TemplateCatalog, TemplateInfo, TemplateMeta, TemplateResource
from .resolver import CandidateResolver
from .utils import epoch_millis, remove_tree_quietly

RUNTIME_SUFFIX = ".docx"
RUNTIME_NAME_RE = re.compile(r"^.+-\d{13,}\.docx$")


class TemplateStager:
    """Resolves templates against ordered search roots and stages fresh runtime copies.

    Runtime files live in a shared directory and are named
    ``<template_id>-<epoch_ms>.docx``. Every file staged by this instance is
    remembered so it can later be discarded without guessing from path text.
    """

    def __init__(
        self,
        search_paths: Sequence[Path],
        runtime_dir: Path,
        *,
        catalog_file: str = "templates.json",
        default_key: str | None = None,
    ) -> None:
        self._resolver = CandidateResolver.from_roots(search_paths)
        self._runtime_dir = runtime_dir
        self._catalog_file = catalog_file
        self._default_key = default_key
        self._staged: set[Path] = set()
        self._lock = threading.Lock()

    @property
    def runtime_dir(self) -> Path:
        return self._runtime_dir

    def load_catalog(self) -> TemplateCatalog:
        catalog_path = self._resolver.resolve(self._catalog_file)
        if catalog_path is None:
            return TemplateCatalog()
        try:
            raw = json.loads(catalog_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError(f"Failed to read template catalog: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StorageError(f"Template catalog is not valid JSON: {exc}") from exc
        entries = raw.get("templates", []) if isinstance(raw, dict) else raw
        if not isinstance(entries, list):
            raise StorageError("Template catalog must be a list of templates")
        return TemplateCatalog(
            templates=[TemplateMeta.from_dict(item) for item in entries if isinstance(item, dict) and "id" in item]
        )

    def find_resource(self, template_id: str, encrypted: bool | None = None) -> TemplateResource:
        path = self._resolver.resolve(template_id) if _is_plain_name(template_id) else None
        if path is None or not path.is_file():
            raise NotFoundError(f"Template '{template_id}' not found in resources/templates")
        if encrypted is None:
            meta = self.load_catalog().get(template_id)
            encrypted = bool(meta and meta.member)
        return TemplateResource(path=path, encrypted=encrypted)

    def stage(
        self,
        template_id: str,
        requires_privileged_access: bool | None = None,
        access_key: str | None = None,
    ) -> TemplateInfo:
        resource = self.find_resource(template_id, requires_privileged_access)
        try:
            self._runtime_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create runtime dir: {exc}") from exc

        if resource.encrypted:
            try:
                blob = resource.path.read_bytes()
            except OSError as exc:
                raise StorageError(f"Failed to read protected template: {exc}") from exc
            payload = decrypt_bytes(blob, access_key or self._default_key)
            runtime_path = self._reserve(template_id)
            try:
                runtime_path.write_bytes(payload)
            except OSError as exc:
                remove_tree_quietly(runtime_path)
                raise StorageError(f"Failed to stage protected template: {exc}") from exc
        else:
            runtime_path = self._reserve(template_id)
            try:
                shutil.copyfile(resource.path, runtime_path)
            except OSError as exc:
                remove_tree_quietly(runtime_path)
                raise StorageError(f"Failed to stage template: {exc}") from exc

        with self._lock:
            self._staged.add(runtime_path.resolve())
        return TemplateInfo(reference_doc=runtime_path, protected_path=resource.path)

    def _reserve(self, template_id: str) -> Path:
        millis = epoch_millis()
        while True:
            candidate = self._runtime_dir / f"{template_id}-{millis}{RUNTIME_SUFFIX}"
            try:
                candidate.open("xb").close()
            except FileExistsError:
                millis += 1
                continue
            except OSError as exc:
                raise StorageError(f"Failed to create runtime template: {exc}") from exc
            return candidate

    def is_runtime_copy(self, path: Path) -> bool:
        resolved = path.resolve()
        with self._lock:
            if resolved in self._staged:
                return True
        try:
            resolved.relative_to(self._runtime_dir.resolve())
        except ValueError:
            return False
        return RUNTIME_NAME_RE.match(resolved.name) is not None

    def discard(self, path: Path) -> bool:
        """Delete a staged runtime copy. Paths outside the runtime area are never touched."""

        if not self.is_runtime_copy(path):
            return False
        removed = remove_tree_quietly(path)
        with self._lock:
            self._staged.discard(path.resolve())
        return removed


def _is_plain_name(template_id: str) -> bool:
    if not template_id or template_id in {".", ".."}:
        return False
    return "/" not in template_id and "\\" not in template_id


__all__ = ["TemplateStager", "RUNTIME_NAME_RE"]
