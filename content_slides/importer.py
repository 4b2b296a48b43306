"""
Content import: files with an explicit format and clipboard-style raw text.

Import state lives in an :class:`ImportSession` that is handed to the
generator, so two imports never share hidden state.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from lxml import etree

from .errors import EmptyInputError, UnsupportedFormatError
from .markup_parser import xml_parser
from .models import ContentFormat, ImportedContent
from .placeholders import build_mapping, detect_placeholders

logger = logging.getLogger(__name__)

EXTENSION_FORMATS = {
    '.xml': ContentFormat.XML,
    '.json': ContentFormat.JSON,
    '.md': ContentFormat.MARKDOWN,
    '.markdown': ContentFormat.MARKDOWN,
}


def sniff_format(text: str) -> ContentFormat:
    """
    Classify raw text: well-formed XML, else any JSON value, else Markdown.

    Anything ``json.loads`` accepts counts as JSON, including bare scalars.
    """
    try:
        etree.fromstring(text.encode("utf-8"), xml_parser())
        return ContentFormat.XML
    except etree.XMLSyntaxError:
        pass

    try:
        json.loads(text)
        return ContentFormat.JSON
    except ValueError:
        pass

    return ContentFormat.MARKDOWN


def format_for_path(path: Union[str, Path]) -> ContentFormat:
    suffix = Path(path).suffix.lower()
    if suffix not in EXTENSION_FORMATS:
        raise UnsupportedFormatError(f"Cannot infer content format from '{path}'; pass it explicitly")
    return EXTENSION_FORMATS[suffix]


@dataclass
class ImportSession:
    """Holds the most recent import, its placeholders and their resolved files."""
    content: Optional[ImportedContent] = None
    placeholders: List[str] = field(default_factory=list)
    mapping: Dict[str, str] = field(default_factory=dict)
    template_path: Optional[str] = None
    base_dir: Optional[Path] = None

    def import_file(self, path: Union[str, Path], fmt=None) -> ImportedContent:
        """Read *path* as UTF-8 and tag it with *fmt* (or the format its extension implies)."""
        path = Path(path)
        content_format = ContentFormat.parse(fmt) if fmt is not None else format_for_path(path)

        text = path.read_text(encoding='utf-8')
        if not text.strip():
            raise EmptyInputError(f"File '{path}' has no content")

        if self.base_dir is None:
            self.base_dir = path.resolve().parent
        return self._accept(ImportedContent(text, content_format))

    def import_text(self, text: str) -> ImportedContent:
        """Import clipboard-style text, sniffing its format."""
        text = (text or '').strip()
        if not text:
            raise EmptyInputError("No content to import")
        return self._accept(ImportedContent(text, sniff_format(text)))

    def _accept(self, content: ImportedContent) -> ImportedContent:
        self.content = content
        self.placeholders = detect_placeholders(content.text)
        self.mapping = {}
        logger.info(
            "Imported %s content (%d chars, %d placeholders)",
            content.format.value, len(content.text), len(self.placeholders),
        )
        return content

    def resolve_placeholders(self, files: Mapping[str, str]) -> Dict[str, str]:
        """Attach user-supplied files to the detected placeholders."""
        self.mapping = build_mapping(self.placeholders, files, self.base_dir)
        return self.mapping

    @property
    def unresolved(self) -> List[str]:
        return [token for token in self.placeholders if token not in self.mapping]
