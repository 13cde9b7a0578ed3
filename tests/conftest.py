from __future__ import annotations

import sys
from pathlib import Path

import pytest

from format_tools.config import AppConfig, RuntimeConfig, TemplatesConfig
from format_tools.crypto import encrypt_bytes
from format_tools.settings import get_settings

TEMPLATE_KEY = "correct horse battery staple"

FAKE_ENGINE = """#!{python}
import json
import os
import sys
from pathlib import Path

args = sys.argv[1:]
if args == ["--version"]:
    print("pandoc 3.1.9")
    print("Features: +server +lua")
    sys.exit(0)
source = Path(args[0])
text = source.read_text(encoding="utf-8")
if "FAIL" in text:
    sys.stderr.write("boom: cannot convert\\n")
    sys.exit(3)
output = Path(args[args.index("-o") + 1])
output.write_text(
    json.dumps({{"args": args, "cwd": os.getcwd(), "input": text}}),
    encoding="utf-8",
)
"""

CATALOG = """{
  "templates": [
    {"id": "plain.docx", "name": "Plain", "description": "", "member": false, "defaultPreset": "business"},
    {"id": "locked.docx", "name": "Locked", "description": "", "member": true, "defaultPreset": "en-paper"}
  ]
}
"""


def build_config(tmp_path: Path, *, retention: int = 5) -> AppConfig:
    runtime = RuntimeConfig(
        cache_root=tmp_path / "cache",
        install_dir=tmp_path / "engine",
        session_retention=retention,
    )
    templates = TemplatesConfig(search_paths=(tmp_path / "dev-templates", tmp_path / "templates"))
    return AppConfig(runtime=runtime, templates=templates)


def install_fake_engine(config: AppConfig, *, crossref: bool = False) -> Path:
    engine = config.engine_path
    engine.parent.mkdir(parents=True, exist_ok=True)
    engine.write_text(FAKE_ENGINE.format(python=sys.executable), encoding="utf-8")
    engine.chmod(0o755)
    if crossref:
        config.crossref_path.write_text("#!/bin/sh\n", encoding="utf-8")
        config.crossref_path.chmod(0o755)
    return engine


def write_templates(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "templates.json").write_text(CATALOG, encoding="utf-8")
    (root / "plain.docx").write_bytes(b"PK plain reference")
    (root / "locked.docx").write_bytes(encrypt_bytes(b"PK locked reference", TEMPLATE_KEY))
    return root


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return build_config(tmp_path)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "FORMAT_TOOLS_CONFIG_PATH",
        "FORMAT_TOOLS_ENABLE_LOCAL_API",
        "FORMAT_TOOLS_CACHE_ROOT",
        "FORMAT_TOOLS_INSTALL_DIR",
        "FORMAT_TOOLS_TEMPLATE_KEY",
        "TEMPLATE_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
