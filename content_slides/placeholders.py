"""
Placeholder token detection and resolution.

A placeholder token is a bracketed request for a user-supplied asset, e.g.
``[Insert Image: Company Logo]``. The whole bracket expression is the token,
so ``[Insert Image: Logo]`` and ``[Insert Chart: Logo]`` are different
placeholders.
"""
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .paths import resolve_asset

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r'\[Insert (Image|Chart|Animation): (.+?)\]')


def detect_placeholders(content: str) -> List[str]:
    """
    Return the distinct placeholder tokens in *content*, in order of first occurrence.

    Args:
        content: Raw imported text (any format)

    Returns:
        List of full bracket expressions, without duplicates
    """
    tokens: List[str] = []
    seen = set()
    for match in PLACEHOLDER_PATTERN.finditer(content or ""):
        token = match.group(0)
        if token not in seen:
            seen.add(token)
            tokens.append(token)
    return tokens


def _split_token(token: str) -> Optional[Tuple[str, str]]:
    match = PLACEHOLDER_PATTERN.fullmatch(token.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def placeholder_kind(token: str) -> Optional[str]:
    """``"Image"``, ``"Chart"`` or ``"Animation"`` for a token, else None."""
    parts = _split_token(token)
    return parts[0] if parts else None


def placeholder_name(token: str) -> Optional[str]:
    """The free-form name inside a token (``"Logo"`` for ``[Insert Image: Logo]``)."""
    parts = _split_token(token)
    return parts[1] if parts else None


def build_mapping(
    detected: Iterable[str],
    files: Mapping[str, str],
    base_dir: Optional[Path] = None,
) -> Dict[str, str]:
    """
    Build the token → absolute path mapping from caller-supplied pairs.

    Only tokens that were actually detected are kept; entries with an empty
    path are left unresolved. Paths are not checked for existence here, the
    renderer falls back when a file is missing.
    """
    known = set(detected)
    mapping: Dict[str, str] = {}

    for token, path in files.items():
        if token not in known:
            logger.warning("Ignoring file for unknown placeholder %s", token)
            continue
        if not path or not str(path).strip():
            continue
        mapping[token] = resolve_asset(str(path), base_dir=base_dir)

    logger.info("Resolved %d of %d placeholders", len(mapping), len(known))
    return mapping


def parse_mapping_arg(value: str) -> Tuple[str, str]:
    """Split a ``TOKEN=PATH`` command-line value at the bracket's closing ``]=``."""
    token, sep, path = value.rpartition(']=')
    if not sep:
        raise ValueError(f"Expected '[Insert Kind: name]=path', got {value!r}")
    return f"{token}]", path
