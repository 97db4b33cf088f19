from __future__ import annotations

from datetime import datetime

from PIL import Image, ImageDraw

from photostamp.constants import EXIF_DATETIME_FORMAT, UK_DATETIME_FORMAT
from photostamp.meta.normalize import gps_to_decimal
from photostamp.models import NormalizedMetadata, OverlayStyle, PixelBuffer
from photostamp.render.typography import TextLayout

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_taken(date_original: str | None) -> str | None:
    if not date_original:
        return None
    try:
        return datetime.strptime(date_original, EXIF_DATETIME_FORMAT).strftime(UK_DATETIME_FORMAT)
    except ValueError:
        return date_original


def format_file_size(size: int | None) -> str:
    size = max(size or 0, 0)
    power = 0
    while power < len(_SIZE_UNITS) - 1 and size >= 1024 ** (power + 1):
        power += 1
    text = f"{round(size / (1024**power), 1):.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text} {_SIZE_UNITS[power]}"


def build_overlay_lines(buffer: PixelBuffer, metadata: NormalizedMetadata, source_name: str) -> list[str]:
    """The five logical banner lines, in display order."""
    taken = format_taken(metadata.date_original)
    coords = gps_to_decimal(metadata.gps)
    return [
        f"Taken: {taken}" if taken else "Taken:",
        f"Dimensions: {buffer.width} x {buffer.height} px ({format_file_size(metadata.file_size)})",
        f"File: {source_name}",
        f"Resolution: {metadata.x_resolution} x {metadata.y_resolution} DPI",
        f"Lat/Lng: {coords[0]:.6f}, {coords[1]:.6f}" if coords else "Lat/Lng:",
    ]


def layout_lines(lines: list[str], layout: TextLayout, max_width: int) -> list[list[str]]:
    return [layout.wrap(line, max_width) for line in lines]


def banner_height_for(physical_lines: int, style: OverlayStyle) -> int:
    return physical_lines * style.line_height + 2 * style.padding


def render_banner(
    width: int,
    lines: list[str],
    layout: TextLayout,
    style: OverlayStyle,
) -> Image.Image:
    text_width = max(1, width - 2 * style.padding)
    # 先测量折行数，再分配横幅高度
    physical_count = sum(layout.measure(line, text_width) for line in lines)
    banner = Image.new("RGBA", (width, banner_height_for(physical_count, style)), style.background_rgba())
    draw = ImageDraw.Draw(banner)
    fill = style.text_rgba()
    y = style.padding
    for wrapped in layout_lines(lines, layout, text_width):
        for row in wrapped:
            layout.draw(draw, row, (style.padding, y), fill)
            y += style.line_height
    return banner


def compose_overlay(
    buffer: PixelBuffer,
    metadata: NormalizedMetadata,
    source_name: str,
    layout: TextLayout,
    style: OverlayStyle,
) -> PixelBuffer:
    width, height = buffer.size
    banner = render_banner(width, build_overlay_lines(buffer, metadata, source_name), layout, style)
    size = (width, height + banner.height)

    if buffer.supports_alpha:
        canvas = Image.new("RGBA", size, (255, 255, 255, 0))
        canvas.paste(buffer.image.convert("RGBA"), (0, 0))
        canvas.paste(banner, (0, height))
        return buffer.derive(canvas)

    canvas = Image.new("RGB", size, (0, 0, 0))
    canvas.paste(buffer.image.convert("RGB"), (0, 0))
    canvas.paste(banner, (0, height), banner)
    return buffer.derive(canvas)
