import pytest

from photostamp.style import normalize_style_dict


def test_normalize_style_dict_clamps_values() -> None:
    style = normalize_style_dict(
        {
            "padding": -4,
            "line_height": 2,
            "font_size": 1,
            "text_color": "not-a-color",
            "background": "#102030",
            "background_opacity": 999,
        }
    )
    assert style.padding == 0
    assert style.line_height == 8
    assert style.font_size == 6
    assert style.text_color == "#FFFFFF"
    assert style.background == "#102030"
    assert style.background_opacity == 255
    assert style.background_rgba() == (16, 32, 48, 255)


def test_normalize_style_dict_defaults() -> None:
    style = normalize_style_dict(None)

    assert (style.padding, style.line_height, style.font_size) == (10, 20, 12)
    assert style.text_rgba() == (255, 255, 255, 255)
    assert style.background_rgba() == (0, 0, 0, 160)


def test_normalize_style_dict_rejects_non_mapping() -> None:
    with pytest.raises(TypeError):
        normalize_style_dict("bold")  # type: ignore[arg-type]
