"""Exceptions raised while importing content and generating slides."""

from __future__ import annotations

from typing import Optional


class ContentSlidesError(Exception):
    """Base class for every error raised by this package."""


class EmptyInputError(ContentSlidesError):
    """Raised when an import yields no usable content."""


class UnsupportedFormatError(ContentSlidesError):
    """Raised when a content format tag is not XML, JSON or MARKDOWN."""


class InvalidMarkupError(ContentSlidesError):
    """Raised when markup violates the schema or is structurally malformed.

    ``schema_violation`` distinguishes an XSD failure from a parse failure so
    callers can surface the two differently.
    """

    def __init__(self, message: str, snippet: Optional[str] = None, schema_violation: bool = False):
        self.snippet = snippet
        self.schema_violation = schema_violation
        super().__init__(message)


class RenderingDegradation(ContentSlidesError):
    """Raised inside a renderer's primary path; always converted to a fallback."""


class ResourceCleanupFailure(ContentSlidesError):
    """A temporary file or workbook could not be released. Logged, never raised to callers."""
