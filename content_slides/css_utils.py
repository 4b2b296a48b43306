"""
Centralized CSS utilities for slide generation.

Themes are plain CSS files. Everything the renderer needs to know about sizes,
fonts and fallback colours is read from custom properties in the ``:root``
block, plus the ``.title`` rule for the fallback title box geometry.
"""
import re
from typing import Any, Dict, Optional

from matplotlib import colors as mcolors
from pptx.dml.color import RGBColor

from .theme_loader import get_css


class CSSParser:
    """
    Centralized CSS parsing utilities.

    Values are cached after the first lookup; a parser instance is bound to a
    single theme.
    """

    def __init__(self, theme: str = "default"):
        self.theme = theme
        self.css_content = get_css(theme)
        self._css_vars = None

    def get_css_variables(self) -> Dict[str, str]:
        """Extract all CSS variables from :root section. Cached for performance."""
        if self._css_vars is not None:
            return self._css_vars

        root_match = re.search(r':root\s*\{([^}]+)\}', self.css_content, re.DOTALL)
        if not root_match:
            raise ValueError(f"No :root section found in theme '{self.theme}'")

        variable_pattern = r'--([^:]+):\s*([^;]+);'
        css_vars = re.findall(variable_pattern, root_match.group(1))
        self._css_vars = {name.strip(): value.strip() for name, value in css_vars}

        return self._css_vars

    def get_raw_value(self, variable_name: str) -> str:
        """Get raw CSS variable value."""
        value = self.get_css_variables().get(variable_name)
        if not value:
            raise ValueError(f"CSS variable '--{variable_name}' not found in theme '{self.theme}'")
        return value

    def get_pt_value(self, variable_name: str) -> float:
        """Get a point value (``12pt``) from a CSS variable."""
        value = self.get_raw_value(variable_name)
        pt_match = re.fullmatch(r'(-?[\d.]+)\s*pt', value)
        if not pt_match:
            raise ValueError(f"CSS variable '--{variable_name}' is not a point value: {value}")
        return float(pt_match.group(1))

    def get_font_family(self) -> str:
        return self.get_raw_value('slide-font-family').strip('\'"')

    def get_rule_box(self, selector: str) -> Dict[str, float]:
        """Read left/top/width/height (in pt) from a CSS rule such as ``.title``."""
        rule_match = re.search(rf'{re.escape(selector)}\s*\{{([^}}]+)\}}', self.css_content, re.DOTALL)
        if not rule_match:
            raise ValueError(f"❌ CSS theme '{self.theme}' missing required rule {selector}")

        box = {}
        for prop in ('left', 'top', 'width', 'height'):
            prop_match = re.search(rf'(?<![-\w]){prop}:\s*(-?[\d.]+)pt', rule_match.group(1))
            if not prop_match:
                raise ValueError(f"❌ CSS theme '{self.theme}' rule {selector} missing '{prop}: XXpt'")
            box[prop] = float(prop_match.group(1))
        return box

    def get_theme_settings(self) -> Dict[str, Any]:
        """Collect every setting the renderer consumes into one dict."""
        return {
            'slide_width': self.get_pt_value('slide-width'),
            'slide_height': self.get_pt_value('slide-height'),
            'font_family': self.get_font_family(),
            'title_font_size': self.get_pt_value('title-font-size'),
            'image_label_font_size': self.get_pt_value('image-label-font-size'),
            'caption_font_size': self.get_pt_value('caption-font-size'),
            'image_outline_color': self.get_raw_value('image-outline-color'),
            'chart_dpi': int(self.get_raw_value('chart-dpi')),
            'title_box': self.get_rule_box('.title'),
        }


def parse_color(value: Optional[str]) -> Optional[RGBColor]:
    """
    Convert ``#RRGGBB``, ``#RGB`` or a named colour (``red``, ``DarkBlue``)
    into an :class:`RGBColor`. Returns None when the value is empty or unknown.
    """
    if not value or not value.strip():
        return None
    value = value.strip()
    if not value.startswith('#') and not value.isalpha():
        return None
    try:
        r, g, b = mcolors.to_rgb(value)
    except ValueError:
        return None
    return RGBColor(round(r * 255), round(g * 255), round(b * 255))


def color_to_hex(value: Optional[str]) -> Optional[str]:
    """Like :func:`parse_color` but returns ``#rrggbb`` for matplotlib."""
    rgb = parse_color(value)
    return f"#{rgb}".lower() if rgb is not None else None
