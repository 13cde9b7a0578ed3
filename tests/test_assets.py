import shutil
from pathlib import Path

import pytest

from format_tools.assets import AssetResolver, rewrite_images


def _setup(tmp_path: Path) -> tuple[Path, Path]:
    base = tmp_path / "doc"
    (base / "img").mkdir(parents=True)
    (base / "img" / "pic.png").write_bytes(b"png-1")
    assets = tmp_path / "session" / "assets"
    assets.mkdir(parents=True)
    return base, assets


def test_rewrites_relative_reference_and_copies(tmp_path: Path) -> None:
    base, assets = _setup(tmp_path)
    result = rewrite_images("See ![Chart](img/pic.png) here.", base, assets)
    assert result.markdown == "See ![Chart](assets/pic.png) here."
    assert (assets / "pic.png").read_bytes() == b"png-1"
    assert len(result.copied) == 1
    assert result.warnings == []


def test_same_reference_copied_once(tmp_path: Path) -> None:
    base, assets = _setup(tmp_path)
    content = "![a](img/pic.png)\n![b](img/pic.png)\n"
    result = AssetResolver(assets).rewrite(content, base)
    assert result.markdown == "![a](assets/pic.png)\n![b](assets/pic.png)\n"
    assert len(result.copied) == 1
    assert sorted(path.name for path in assets.iterdir()) == ["pic.png"]


def test_distinct_files_with_same_name_get_unique_names(tmp_path: Path) -> None:
    base, assets = _setup(tmp_path)
    (base / "other").mkdir()
    (base / "other" / "pic.png").write_bytes(b"png-2")
    content = "![a](img/pic.png) ![b](other/pic.png)"
    result = rewrite_images(content, base, assets)
    assert result.markdown == "![a](assets/pic.png) ![b](assets/pic_1.png)"
    assert (assets / "pic_1.png").read_bytes() == b"png-2"
    assert len(result.copied) == 2


def test_remote_and_missing_references_untouched(tmp_path: Path) -> None:
    base, assets = _setup(tmp_path)
    content = "![r](https://example.com/x.png) ![m](img/missing.png)"
    result = rewrite_images(content, base, assets)
    assert result.markdown == content
    assert result.copied == []
    assert list(assets.iterdir()) == []


def test_absolute_reference_resolved_without_base_dir(tmp_path: Path) -> None:
    base, assets = _setup(tmp_path)
    absolute = (base / "img" / "pic.png").resolve()
    result = rewrite_images(f"![x]({absolute})", None, assets)
    assert result.markdown == "![x](assets/pic.png)"
    assert result.copied == [(assets / "pic.png").resolve()]


def test_copy_failure_keeps_reference_and_continues(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    base, assets = _setup(tmp_path)
    (base / "img" / "bad.png").write_bytes(b"png-bad")
    real_copyfile = shutil.copyfile

    def flaky_copyfile(source, target, *args, **kwargs):
        if Path(source).name == "bad.png":
            raise OSError("disk full")
        return real_copyfile(source, target, *args, **kwargs)

    monkeypatch.setattr(shutil, "copyfile", flaky_copyfile)
    result = rewrite_images("![a](img/bad.png) ![b](img/pic.png)", base, assets)

    assert result.markdown == "![a](img/bad.png) ![b](assets/pic.png)"
    assert result.copied == [(assets / "pic.png").resolve()]
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("IMAGE_COPY_FAILED: img/bad.png")
    assert not (assets / "bad.png").exists()
