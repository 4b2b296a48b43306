"""Test theme loader and CSS theme settings."""

import pytest
from pptx.dml.color import RGBColor

from content_slides.css_utils import CSSParser, color_to_hex, parse_color
from content_slides.theme_loader import get_css, list_available_themes, validate_theme


def test_get_css_default():
    """Test that default theme loads and returns CSS content."""
    css = get_css("default")

    assert isinstance(css, str)
    assert ":root" in css
    assert ".title" in css
    assert "--slide-width" in css


def test_get_css_invalid_theme():
    """Test that invalid theme names raise appropriate errors."""
    with pytest.raises(FileNotFoundError):
        get_css("nonexistent")

    # Invalid characters (path traversal attempt)
    with pytest.raises(ValueError):
        get_css("../evil")

    with pytest.raises(ValueError):
        get_css("theme/../../evil")


def test_list_available_themes():
    themes = list_available_themes()
    assert "default" in themes
    assert "segoe-amber" in themes
    assert themes == sorted(themes)


def test_validate_theme():
    assert validate_theme("default") is True
    assert validate_theme("segoe-amber") is True
    assert validate_theme("nonexistent") is False
    assert validate_theme("../evil") is False


def test_theme_settings():
    """Every setting the renderer reads is present and typed."""
    settings = CSSParser("default").get_theme_settings()

    assert settings["slide_width"] == 960.0
    assert settings["slide_height"] == 540.0
    assert settings["font_family"] == "Calibri"
    assert settings["title_font_size"] == 32.0
    assert settings["image_label_font_size"] == 12.0
    assert settings["caption_font_size"] == 14.0
    assert settings["chart_dpi"] == 150
    assert settings["title_box"] == {"left": 50.0, "top": 20.0, "width": 600.0, "height": 50.0}


def test_themes_differ():
    default = CSSParser("default").get_theme_settings()
    alternate = CSSParser("segoe-amber").get_theme_settings()
    assert default["font_family"] != alternate["font_family"]
    assert default["image_outline_color"] != alternate["image_outline_color"]


def test_missing_variable_is_reported():
    parser = CSSParser("default")
    with pytest.raises(ValueError, match="--no-such-thing"):
        parser.get_raw_value("no-such-thing")
    with pytest.raises(ValueError, match="not a point value"):
        parser.get_pt_value("image-outline-color")


@pytest.mark.parametrize("value, expected", [
    ("#FF0000", RGBColor(0xFF, 0, 0)),
    ("#0f0", RGBColor(0, 0xFF, 0)),
    ("blue", RGBColor(0, 0, 0xFF)),
    ("DarkBlue", RGBColor(0, 0, 0x8B)),
    ("  red ", RGBColor(0xFF, 0, 0)),
])
def test_parse_color(value, expected):
    assert parse_color(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "notacolour", "#GGGGGG", "rgb(1,2,3)", "0.5"])
def test_parse_color_rejects(value):
    assert parse_color(value) is None


def test_color_to_hex():
    assert color_to_hex("Red") == "#ff0000"
    assert color_to_hex("bogus") is None


def test_custom_theme_file(tmp_path):
    custom = tmp_path / "corporate.css"
    custom.write_text(
        get_css("default").replace('"Calibri"', '"Georgia"').replace("32pt", "40pt"),
        encoding="utf-8",
    )

    assert validate_theme(str(custom)) is True
    settings = CSSParser(str(custom)).get_theme_settings()
    assert settings["font_family"] == "Georgia"
    assert settings["title_font_size"] == 40.0

    assert validate_theme(str(tmp_path / "missing.css")) is False
    with pytest.raises(FileNotFoundError):
        get_css(str(tmp_path / "missing.css"))
