from __future__ import annotations

from typing import Any

from PIL import ImageColor

from photostamp.models import OverlayStyle


def _safe_color(value: Any, fallback: str) -> str:
    text = str(value or "").strip()
    if not text:
        return fallback
    try:
        ImageColor.getrgb(text)
    except ValueError:
        return fallback
    return text


def normalize_style_dict(data: dict[str, Any] | None) -> OverlayStyle:
    """Build an :class:`OverlayStyle` from a config mapping, clamping bad values."""
    defaults = OverlayStyle()
    values: dict[str, Any] = {
        "padding": defaults.padding,
        "line_height": defaults.line_height,
        "font_size": defaults.font_size,
        "text_color": defaults.text_color,
        "background": defaults.background,
        "background_opacity": defaults.background_opacity,
    }
    if data is not None and not isinstance(data, dict):
        raise TypeError(f"style must be a mapping, got {type(data).__name__}")
    values.update({k: v for k, v in (data or {}).items() if v is not None})

    return OverlayStyle(
        padding=max(0, int(values["padding"])),
        line_height=max(8, int(values["line_height"])),
        font_size=max(6, int(values["font_size"])),
        text_color=_safe_color(values["text_color"], defaults.text_color),
        background=_safe_color(values["background"], defaults.background),
        background_opacity=min(255, max(0, int(values["background_opacity"]))),
    )
