import json
from pathlib import Path

import pytest

from conftest import TEMPLATE_KEY, build_config, install_fake_engine, write_templates
from format_tools.core import FormatToolsService
from format_tools.errors import NotFoundError
from format_tools.models import ConvertOptions, FileSource, TextSource


def build_service(tmp_path: Path) -> FormatToolsService:
    config = build_config(tmp_path)
    install_fake_engine(config)
    write_templates(tmp_path / "templates")
    return FormatToolsService(config, template_key=TEMPLATE_KEY)


def test_prepare_stage_and_convert(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    source = tmp_path / "paper" / "paper.md"
    (source.parent / "figs").mkdir(parents=True)
    (source.parent / "figs" / "plot.png").write_bytes(b"png")
    source.write_text("# Results\n\n![plot](figs/plot.png)\n", encoding="utf-8")

    prepared = service.prepare_input(FileSource(path=source))
    template = service.stage_template("locked.docx")
    metadata = service.build_metadata({"title": "Results"}, template_id="locked.docx")
    result = service.convert(
        ConvertOptions(
            input_file=prepared.markdown_path,
            source_dir=prepared.source_dir,
            source_name=prepared.source_name,
            reference_doc=template.reference_doc,
            metadata=metadata,
        )
    )

    assert result.output_path == (source.parent / "paper_format-tools.docx").resolve()
    record = json.loads(result.output_path.read_text(encoding="utf-8"))
    assert "title: Results" in record["input"]
    assert "figPrefix:\n  - fig.\n  - figs.\n" in record["input"]
    assert "![plot](assets/plot.png)" in record["input"]
    assert "--reference-doc" in record["args"]
    assert not template.reference_doc.exists()


def test_explicit_preset_wins_over_template_default(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    metadata = service.build_metadata(None, preset="zh-paper", template_id="locked.docx")
    assert metadata["figureTitle"] == "图"
    assert metadata["sectionsDepth"] == 3


def test_template_default_preset_applies(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    metadata = service.build_metadata({}, template_id="plain.docx")
    assert metadata["secPrefix"] == "章节"


def test_list_templates(tmp_path: Path) -> None:
    catalog = build_service(tmp_path).list_templates()
    assert catalog.has_premium is True
    assert len(catalog.templates) == 2


def test_operations_are_logged(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    service.prepare_input(TextSource(content="hello"))
    with pytest.raises(NotFoundError):
        service.stage_template("missing.docx")

    entries = service.logger.read()
    assert [entry["operation"] for entry in entries] == ["prepare", "stage_template"]
    assert entries[0]["status"] == "success"
    assert entries[1]["status"] == "failure"
    assert entries[1]["error_code"] == "NOT_FOUND"


def test_template_listing_is_logged(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    service.list_templates()
    service.build_metadata({}, template_id="plain.docx")

    entries = service.logger.read()
    assert [entry["operation"] for entry in entries] == ["list_templates"]
    assert entries[0]["status"] == "success"
    assert entries[0]["output"] == "2 templates"


def test_clear_sessions(tmp_path: Path) -> None:
    service = build_service(tmp_path)
    service.prepare_input(TextSource(content="one"))
    service.prepare_input(TextSource(content="two"))
    assert len(service.sessions.list_sessions()) == 2
    service.clear_sessions()
    assert not service.sessions.root.exists()
    assert service.prepare_input(TextSource(content="three")).markdown_path.exists()


def test_engine_status(tmp_path: Path) -> None:
    status = build_service(tmp_path).engine_status()
    assert status.engine_installed is True
    assert status.crossref_installed is False
    assert status.version == "pandoc 3.1.9"
