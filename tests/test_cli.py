import json
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from photostamp.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("PHOTOSTAMP_CONFIG", str(tmp_path / "config" / "config.yaml"))


def _photo_dir(root: Path) -> Path:
    in_dir = root / "input"
    in_dir.mkdir()
    Image.new("RGB", (40, 30), "#204060").save(in_dir / "one.jpg", format="JPEG")
    Image.new("RGBA", (40, 30), (0, 0, 0, 0)).save(in_dir / "two.png")
    (in_dir / "bad.webp").write_bytes(b"RIFF....WEBPjunk")
    (in_dir / "notes.txt").write_text("not an image", encoding="utf-8")
    return in_dir


def test_annotate_processes_directory_and_reports_counts(tmp_path: Path) -> None:
    in_dir = _photo_dir(tmp_path)
    out_dir = tmp_path / "output"

    result = runner.invoke(app, ["annotate", "--in", str(in_dir), "--out", str(out_dir), "--max-width", "20"])

    assert result.exit_code == 0, result.output
    assert "processed=2 skipped=1 errors=1" in result.stdout
    with Image.open(out_dir / "one.jpg") as saved:
        assert saved.width == 20


def test_annotate_missing_input_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["annotate", "--in", str(tmp_path / "absent"), "--out", str(tmp_path / "out")])

    assert result.exit_code == 1


def test_annotate_missing_font_falls_back(tmp_path: Path) -> None:
    in_dir = _photo_dir(tmp_path)

    result = runner.invoke(
        app,
        ["annotate", "--in", str(in_dir), "--out", str(tmp_path / "out"), "--font", str(tmp_path / "none.ttf")],
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "two.png").exists()


def test_inspect_prints_json(tmp_path: Path) -> None:
    photo = tmp_path / "tagged.jpg"
    exif = Image.Exif()
    exif[0x010F] = "Fujifilm"
    exif[0x0112] = 8
    Image.new("RGB", (12, 12)).save(photo, format="JPEG", exif=exif.tobytes())

    result = runner.invoke(app, ["inspect", str(photo)])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["camera_make"] == "Fujifilm"
    assert payload["orientation"] == 8
    assert payload["x_resolution"] == "72/1"
    assert payload["gps"] is None


def test_report_writes_text_files(tmp_path: Path) -> None:
    in_dir = _photo_dir(tmp_path)
    report_dir = tmp_path / "report"

    result = runner.invoke(app, ["report", "--in", str(in_dir), "--out", str(report_dir)])

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in report_dir.iterdir()) == ["one.txt", "two.txt"]
    assert "reports=2 errors=1" in result.stdout


def test_init_config_writes_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["init-config"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "config" / "config.yaml").exists()


def test_check_lists_environment(tmp_path: Path) -> None:
    in_dir = _photo_dir(tmp_path)

    result = runner.invoke(app, ["check", "--in", str(in_dir), "--fonts", str(tmp_path / "fonts")])

    assert result.exit_code == 0, result.output
    assert "Pillow version" in result.stdout
    assert "one.jpg" in result.stdout
