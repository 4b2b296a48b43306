"""Helpers for asset paths, output paths and throw-away files.

Every scratch file the package creates (converted templates, rendered chart
images) goes through :func:`temp_path`, which removes it again when the block
ends. A failed removal is logged and never raised.
"""
from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import ResourceCleanupFailure

logger = logging.getLogger(__name__)

__all__ = ["resolve_asset", "resolve_output_path", "temp_path"]


def resolve_asset(src: str, *, base_dir: Optional[Path] = None) -> str:
    """Return the absolute path for a user-supplied asset *src*.

    Rules
    -----
    1. ``file://`` URLs are stripped to a plain path first.
    2. ``~`` is expanded.
    3. Relative paths are resolved against *base_dir* (default: cwd).
    """
    src = src.strip()
    if src.startswith("file://"):
        src = src[7:]
    base = Path(base_dir) if base_dir else Path.cwd()
    return str((base / Path(src).expanduser()).resolve())


def resolve_output_path(output_path: str | Path) -> Path:
    """Ensure a ``.pptx`` suffix and an existing parent directory."""
    path = Path(output_path)
    if path.suffix.lower() != ".pptx":
        path = path.with_name(f"{path.name}.pptx")
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def remove_quietly(path: str | Path) -> None:
    """Delete *path*; failures are logged as :class:`ResourceCleanupFailure`."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        failure = ResourceCleanupFailure(f"Could not remove temporary file {path}: {exc}")
        logger.warning("%s", failure)


@contextmanager
def temp_path(suffix: str = "", prefix: str = "content_slides_") -> Iterator[Path]:
    """Yield a fresh temporary file path that is removed on exit."""
    fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix)
    os.close(fd)
    try:
        yield Path(name)
    finally:
        remove_quietly(name)
