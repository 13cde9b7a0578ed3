from pathlib import Path

from format_tools.logging import RunLogEntry, RunLogger


def test_append_and_read(tmp_path: Path) -> None:
    logger = RunLogger(tmp_path / "logs" / "log.jsonl")
    logger.append(RunLogEntry(operation="prepare", status="success", warnings=["IMAGE_COPY_FAILED: x"]))
    logger.append(RunLogEntry(operation="convert", status="failure", error_code="ENGINE_MISSING"))
    entries = logger.read()
    assert [entry["operation"] for entry in entries] == ["prepare", "convert"]
    assert entries[0]["warnings"] == ["IMAGE_COPY_FAILED: x"]
    assert entries[1]["error_code"] == "ENGINE_MISSING"
    assert logger.read(limit=1) == entries[1:]


def test_read_skips_corrupt_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "log.jsonl"
    log_file.write_text('{"operation": "prepare"}\nnot json\n', encoding="utf-8")
    assert RunLogger(log_file).read() == [{"operation": "prepare"}]
    assert RunLogger(tmp_path / "absent.jsonl").read() == []
