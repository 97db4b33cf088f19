from pathlib import Path

import pytest
from PIL import Image

from photostamp.errors import ImageLoadError
from photostamp.meta.report import build_metadata_report, format_tag_tree, write_report


def test_format_tag_tree_nests_sections() -> None:
    text = format_tag_tree({"IFD0": {"Make": "Sony", "XResolution": (72, 1)}, "Note": b"\x00\x01"})

    assert text.splitlines() == ["IFD0:", "  Make: Sony", "  XResolution: 72, 1", "Note: <2 bytes>"]


def test_build_metadata_report_sections() -> None:
    raw = {
        "IFD0": {"Make": "Sony", "Model": "ILCE-7M4", "Orientation": 6, "DateTime": "2024:01:02 03:04:05"},
        "EXIF": {"DateTimeOriginal": "2024:01:01 12:00:00", "ExposureTime": 0.004, "FNumber": 4.0, "LensModel": "FE 35mm"},
        "GPS": {"GPSLatitudeRef": "N"},
    }

    text = build_metadata_report(
        Path("input/a.jpg"), raw, dimensions=(6000, 4000), file_size=1234567, image_format="JPEG"
    )

    assert "File Size: 1,234,567 bytes" in text
    assert "Dimensions: 6000 x 4000 pixels" in text
    assert "Image Type: JPEG (image/jpeg)" in text
    assert "Camera Model: ILCE-7M4" in text
    assert "Exposure Time: 1/250s" in text
    assert "F-Number: f/4" in text
    assert "Lens: FE 35mm" in text
    assert "Date/Time Original: 2024:01:01 12:00:00" in text
    assert "Date/Time Modified: 2024:01:02 03:04:05" in text
    assert "Orientation Description: Rotate 90° CW" in text
    assert "GPSLatitudeRef: N" in text


def test_build_metadata_report_without_exif() -> None:
    text = build_metadata_report(Path("x.png"), {}, dimensions=(1, 1), file_size=1, image_format="PNG")

    assert text == "No EXIF data found in: x.png\n"


def test_write_report_uses_stem(tmp_path: Path) -> None:
    source = tmp_path / "holiday.jpg"
    Image.new("RGB", (10, 10)).save(source, format="JPEG")

    output = write_report(source, tmp_path / "report")

    assert output == tmp_path / "report" / "holiday.txt"
    assert output.read_text(encoding="utf-8").startswith("No EXIF data found in:")


def test_write_report_rejects_unreadable_images(tmp_path: Path) -> None:
    source = tmp_path / "junk.jpg"
    source.write_bytes(b"junk")

    with pytest.raises(ImageLoadError):
        write_report(source, tmp_path / "report")
