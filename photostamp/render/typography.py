from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from PIL import ImageDraw, ImageFont, features

LOGGER = logging.getLogger(__name__)

Fill = tuple[int, int, int, int]


class TextLayout(Protocol):
    """Measurement and drawing of banner text.

    ``measure`` is pure and only reports how many physical lines ``text`` needs
    at ``max_width``; ``draw`` paints one physical line.
    """

    def wrap(self, text: str, max_width: int) -> list[str]: ...

    def measure(self, text: str, max_width: int) -> int: ...

    def draw(self, draw: ImageDraw.ImageDraw, text: str, position: tuple[int, int], fill: Fill) -> None: ...


def text_width(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> int:
    left, _top, right, _bottom = font.getbbox(text)
    return int(right - left)


class ScalableTextLayout:
    def __init__(self, font: ImageFont.FreeTypeFont) -> None:
        self.font = font

    def wrap(self, text: str, max_width: int) -> list[str]:
        lines: list[str] = []
        current = ""
        for word in text.split(" "):
            candidate = f"{current} {word}" if current else word
            if current and text_width(candidate, self.font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines or [text]

    def measure(self, text: str, max_width: int) -> int:
        return max(1, len(self.wrap(text, max_width)))

    def draw(self, draw: ImageDraw.ImageDraw, text: str, position: tuple[int, int], fill: Fill) -> None:
        draw.text(position, text, font=self.font, fill=fill)


class FixedWidthTextLayout:
    """Pillow's built-in bitmap font; every logical line stays on one row."""

    def __init__(self) -> None:
        self.font = ImageFont.load_default_imagefont()

    def wrap(self, text: str, max_width: int) -> list[str]:
        return [text]

    def measure(self, text: str, max_width: int) -> int:
        return 1

    def draw(self, draw: ImageDraw.ImageDraw, text: str, position: tuple[int, int], fill: Fill) -> None:
        draw.text(position, text, font=self.font, fill=fill)


def load_font(font_path: Path | None, size: int) -> ImageFont.FreeTypeFont | None:
    if font_path is None:
        return None
    if not features.check("freetype2"):
        LOGGER.warning("FreeType support is not available; using built-in font instead of %s", font_path)
        return None
    if not font_path.is_file():
        LOGGER.warning("Font file not found: %s; using built-in font", font_path)
        return None
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError as exc:
        LOGGER.warning("Font file could not be loaded: %s (%s); using built-in font", font_path, exc)
        return None


def select_text_layout(font_path: Path | None, font_size: int) -> TextLayout:
    """Pick the layout strategy for a whole run."""
    font = load_font(font_path, font_size)
    if font is None:
        return FixedWidthTextLayout()
    LOGGER.info("Font file: %s", font_path)
    return ScalableTextLayout(font)
