from pathlib import Path

from format_tools.utils import atomic_write, make_unique_name, remove_tree_quietly


def test_make_unique_name_appends_counter_before_extension(tmp_path: Path) -> None:
    assert make_unique_name("pic.png", tmp_path) == "pic.png"
    (tmp_path / "pic.png").write_bytes(b"1")
    assert make_unique_name("pic.png", tmp_path) == "pic_1.png"
    (tmp_path / "pic_1.png").write_bytes(b"2")
    assert make_unique_name("pic.png", tmp_path) == "pic_2.png"


def test_make_unique_name_without_extension(tmp_path: Path) -> None:
    (tmp_path / "image").write_bytes(b"1")
    assert make_unique_name("image", tmp_path) == "image_1"


def test_atomic_write_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "doc.md"
    atomic_write(target, "hello\n")
    assert target.read_text(encoding="utf-8") == "hello\n"
    assert list(target.parent.iterdir()) == [target]


def test_remove_tree_quietly_handles_files_and_dirs(tmp_path: Path) -> None:
    folder = tmp_path / "tree"
    (folder / "inner").mkdir(parents=True)
    (folder / "inner" / "a.txt").write_text("a", encoding="utf-8")
    single = tmp_path / "single.txt"
    single.write_text("b", encoding="utf-8")
    assert remove_tree_quietly(folder)
    assert remove_tree_quietly(single)
    assert remove_tree_quietly(tmp_path / "missing")
    assert not folder.exists()
    assert not single.exists()
