from __future__ import annotations

import os
import shutil
import tempfile
import time
from pathlib import Path


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def make_unique_name(base_name: str, directory: Path) -> str:
    """Return ``base_name`` or ``stem_N.ext`` such that it is absent from ``directory``."""

    stem, dot, ext = base_name.rpartition(".")
    if not dot or not stem:
        stem, ext = base_name, ""
    candidate = base_name
    counter = 1
    while (directory / candidate).exists():
        candidate = f"{stem}_{counter}.{ext}" if ext else f"{stem}_{counter}"
        counter += 1
    return candidate


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", delete=False, dir=path.parent, encoding=encoding, newline=""
    ) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(delete=False, dir=path.parent) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def remove_tree_quietly(path: Path) -> bool:
    """Delete a file or directory tree, returning whether it is gone."""

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError:
        return False
    return True

