"""
Content Slides Package

A package for generating PowerPoint slides from XML, JSON or Markdown content,
with placeholder substitution for user-supplied images and optional corporate
templates.
"""

from .errors import (
    ContentSlidesError,
    EmptyInputError,
    InvalidMarkupError,
    RenderingDegradation,
    ResourceCleanupFailure,
    UnsupportedFormatError,
)
from .generator import SlideGenerator
from .importer import ImportSession
from .markup_parser import parse_markup
from .models import ContentFormat, ElementResult, GenerationReport, RenderStatus, SlideSpec
from .placeholders import detect_placeholders
from .pptx_renderer import PPTXRenderer

__all__ = [
    'SlideGenerator', 'PPTXRenderer', 'ImportSession', 'parse_markup', 'detect_placeholders',
    'ContentFormat', 'SlideSpec', 'ElementResult', 'GenerationReport', 'RenderStatus',
    'ContentSlidesError', 'EmptyInputError', 'InvalidMarkupError', 'UnsupportedFormatError',
    'RenderingDegradation', 'ResourceCleanupFailure',
]
