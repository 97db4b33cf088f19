from __future__ import annotations

from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError, features

from photostamp.constants import (
    ALPHA_FORMATS,
    FORMAT_BY_EXTENSION,
    JPEG_QUALITY,
    PNG_COMPRESS_LEVEL,
    WEBP_QUALITY,
)
from photostamp.errors import ImageLoadError, ImageSaveError
from photostamp.models import PixelBuffer

REQUIRED_FEATURES = {"jpg": "JPEG codec (libjpeg)", "zlib": "PNG codec (zlib)"}
OPTIONAL_FEATURES = {"webp": "WEBP codec (libwebp)", "freetype2": "FreeType (scalable fonts)"}

GIF_TRANSPARENT_INDEX = 255


def format_for_path(path: Path) -> str:
    fmt = FORMAT_BY_EXTENSION.get(path.suffix.lower())
    if fmt is None:
        raise ImageLoadError(f"unsupported image format: {path.suffix}")
    return fmt


def missing_capabilities(names: dict[str, str] = REQUIRED_FEATURES) -> list[str]:
    missing: list[str] = []
    for feature, label in names.items():
        try:
            available = features.check(feature)
        except ValueError:
            available = False
        if not available:
            missing.append(label)
    return missing


def load_image(path: Path) -> PixelBuffer:
    """Decode ``path`` without applying EXIF orientation.

    Alpha-capable formats come back as RGBA, everything else as RGB.
    """
    fmt = format_for_path(path)
    target_mode = "RGBA" if fmt in ALPHA_FORMATS else "RGB"
    try:
        with Image.open(path) as image:
            image.load()
            decoded = image.convert(target_mode)
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise ImageLoadError(f"cannot load image {path.name}: {exc}") from exc
    return PixelBuffer(image=decoded, format=fmt)


def _gif_frame(image: Image.Image) -> tuple[Image.Image, dict[str, Any]]:
    """Palette frame for GIF output; pixels under half alpha share one transparent index."""
    if image.mode != "RGBA":
        return image, {}
    # 调色板留出最后一个索引给透明色
    frame = image.convert("RGB").quantize(colors=GIF_TRANSPARENT_INDEX)
    palette = frame.getpalette() or []
    frame.putpalette(palette + [0] * (768 - len(palette)))
    hidden = image.getchannel("A").point(lambda a: 255 if a < 128 else 0)
    frame.paste(GIF_TRANSPARENT_INDEX, mask=hidden)
    return frame, {"transparency": GIF_TRANSPARENT_INDEX}


def save_image(buffer: PixelBuffer, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    image = buffer.image
    try:
        if buffer.format == "jpeg":
            image.convert("RGB").save(path, format="JPEG", quality=JPEG_QUALITY)
        elif buffer.format == "png":
            image.save(path, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
        elif buffer.format == "gif":
            frame, params = _gif_frame(image)
            frame.save(path, format="GIF", **params)
        elif buffer.format == "webp":
            image.save(path, format="WEBP", quality=WEBP_QUALITY)
        else:
            raise ImageSaveError(f"unsupported output format: {buffer.format}")
    except (OSError, ValueError, KeyError) as exc:
        raise ImageSaveError(f"cannot save image {path.name}: {exc}") from exc
