from pathlib import Path

from photostamp.discover import discover_inputs, is_supported_image, list_directory_files


def test_is_supported_image_ignores_case() -> None:
    assert is_supported_image(Path("IMG_0001.JPG"))
    assert is_supported_image(Path("scan.WebP"))
    assert not is_supported_image(Path("notes.txt"))
    assert not is_supported_image(Path("raw.cr3"))


def test_listing_is_sorted_and_flat(tmp_path: Path) -> None:
    for name in ("c.png", "a.jpg", "b.txt"):
        (tmp_path / name).write_bytes(b"")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "d.jpg").write_bytes(b"")

    assert [p.name for p in list_directory_files(tmp_path)] == ["a.jpg", "b.txt", "c.png"]
    assert [p.name for p in discover_inputs(tmp_path)] == ["a.jpg", "c.png"]


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    assert list_directory_files(tmp_path / "absent") == []
