from pathlib import Path

import pytest
from PIL import Image

from photostamp.decoders.image_codec import load_image, save_image
from photostamp.errors import ImageLoadError
from photostamp.models import PixelBuffer


@pytest.mark.parametrize(
    "fmt, mode, expected_format, expected_params",
    [
        ("jpeg", "RGB", "JPEG", {"quality": 95}),
        ("png", "RGBA", "PNG", {"compress_level": 9}),
        ("webp", "RGBA", "WEBP", {"quality": 95}),
        ("gif", "RGB", "GIF", {}),
    ],
)
def test_save_image_encoder_settings(tmp_path: Path, monkeypatch, fmt, mode, expected_format, expected_params) -> None:
    calls: list[tuple[str, str, dict]] = []

    def _record(self, fp, format=None, **params) -> None:
        calls.append((self.mode, format, params))

    monkeypatch.setattr(Image.Image, "save", _record)

    save_image(PixelBuffer(image=Image.new(mode, (4, 4)), format=fmt), tmp_path / f"out.{fmt}")

    assert len(calls) == 1
    saved_mode, saved_format, params = calls[0]
    assert saved_format == expected_format
    assert params == expected_params
    if fmt == "jpeg":
        assert saved_mode == "RGB"


def test_save_image_jpeg_drops_alpha(tmp_path: Path) -> None:
    target = tmp_path / "flat.jpg"

    save_image(PixelBuffer(image=Image.new("RGBA", (6, 6), (200, 10, 10, 0)), format="jpeg"), target)

    with Image.open(target) as saved:
        assert saved.mode == "RGB"


def test_gif_keeps_transparent_pixels(tmp_path: Path) -> None:
    image = Image.new("RGBA", (20, 20), (10, 20, 30, 0))
    image.paste((250, 250, 250, 255), (0, 10, 20, 20))
    target = tmp_path / "mixed.gif"

    save_image(PixelBuffer(image=image, format="gif"), target)

    reloaded = load_image(target).image
    assert reloaded.mode == "RGBA"
    assert reloaded.getpixel((5, 2))[3] == 0
    assert reloaded.getpixel((5, 15))[3] == 255
    assert reloaded.getpixel((5, 15))[0] > 200


def test_load_image_modes(tmp_path: Path) -> None:
    jpeg = tmp_path / "a.jpg"
    png = tmp_path / "b.png"
    Image.new("L", (3, 3)).save(jpeg, format="JPEG")
    Image.new("RGB", (3, 3)).save(png)

    assert load_image(jpeg).image.mode == "RGB"
    assert load_image(png).image.mode == "RGBA"


def test_load_image_rejects_unknown_extension(tmp_path: Path) -> None:
    with pytest.raises(ImageLoadError):
        load_image(tmp_path / "scan.tiff")
