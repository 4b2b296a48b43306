"""Theme loader for the CSS files that configure slide generation.

A theme is either the name of a bundled file in ``content_slides/themes``
(``default``, ``segoe-amber``) or a path to a user ``.css`` file carrying
the same ``:root`` variables.
"""
import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

THEMES_DIR = Path(__file__).parent / "themes"


def _is_theme_file(theme: str) -> bool:
    return theme.lower().endswith(".css")


def theme_path(theme: str = "default") -> Path:
    """
    Locate the CSS file for *theme*.

    Raises:
        FileNotFoundError: If the theme file doesn't exist
        ValueError: If a bundled theme name contains anything but letters, digits, ``-`` and ``_``
    """
    if _is_theme_file(theme):
        path = Path(theme).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"Theme file '{theme}' not found")
        return path

    # Bundled names must not escape THEMES_DIR
    if not theme.replace("_", "").replace("-", "").isalnum():
        raise ValueError(f"Invalid theme name: {theme}")

    path = THEMES_DIR / f"{theme}.css"
    if not path.exists():
        raise FileNotFoundError(
            f"Theme '{theme}' not found. Available themes: {list_available_themes()}"
        )
    return path


def get_css(theme: str = "default") -> str:
    """
    Load CSS content for the specified theme.

    Args:
        theme: Bundled theme name (default, segoe-amber) or path to a .css file

    Returns:
        CSS content as string
    """
    path = theme_path(theme)
    logger.debug("Loading theme %s from %s", theme, path)
    return path.read_text(encoding="utf-8")


def list_available_themes() -> List[str]:
    """Names of the bundled themes, sorted."""
    if not THEMES_DIR.exists():
        return []
    return sorted(f.stem for f in THEMES_DIR.glob("*.css") if f.is_file())


def validate_theme(theme: str) -> bool:
    """True when *theme* resolves to a readable theme file."""
    try:
        theme_path(theme)
        return True
    except (FileNotFoundError, ValueError):
        return False
