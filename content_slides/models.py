"""
Data models for the content-to-slide generator.

Every markup format is parsed into the same tree: a list of :class:`SlideSpec`,
each holding typed content elements. Elements are a closed set of dataclasses
(one per kind) rather than tag strings, so the renderer dispatches on type.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .errors import UnsupportedFormatError


class ContentFormat(Enum):
    XML = "XML"
    JSON = "JSON"
    MARKDOWN = "MARKDOWN"

    @classmethod
    def parse(cls, value) -> "ContentFormat":
        """Accept a ContentFormat or a case-insensitive name (``md`` too)."""
        if isinstance(value, cls):
            return value
        name = str(value or "").strip().upper()
        if name == "MD":
            name = "MARKDOWN"
        try:
            return cls[name]
        except KeyError:
            raise UnsupportedFormatError(f"Unsupported content format: {value!r}") from None


@dataclass
class ImportedContent:
    text: str
    format: ContentFormat


@dataclass
class Geometry:
    """
    Raw position/size attributes as written in the source markup.

    Values stay strings until render time, where they are validated against
    the slide bounds (see :mod:`content_slides.geometry`).
    """
    left: Optional[str] = None
    top: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    placeholder: Optional[str] = None  # placeholder-type hint, e.g. "body"


@dataclass(frozen=True)
class GeometryRect:
    """Validated bounds in points."""
    left: float
    top: float
    width: float
    height: float


@dataclass
class RunSpec:
    """A text run with its effective formatting (already merged over the paragraph)."""
    text: str
    style: str = ""
    color: str = ""
    font_size: str = ""

    @property
    def bold(self) -> bool:
        return "bold" in self.style

    @property
    def italic(self) -> bool:
        return "italic" in self.style

    @property
    def underline(self) -> bool:
        return "underline" in self.style


@dataclass
class ParagraphSpec:
    runs: List[RunSpec] = field(default_factory=list)
    style: str = ""
    color: str = ""
    font_size: str = ""

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass
class ListItemSpec:
    paragraphs: List[ParagraphSpec] = field(default_factory=list)
    sublists: List["ListElement"] = field(default_factory=list)


@dataclass
class CellSpec:
    text: str = ""
    style: str = ""
    color: str = ""
    font_size: str = ""


@dataclass
class RowSpec:
    cells: List[CellSpec] = field(default_factory=list)


@dataclass
class SeriesStyleSpec:
    color: str = ""


@dataclass
class TextboxElement:
    kind = "textbox"
    geometry: Geometry = field(default_factory=Geometry)
    blocks: List[Union[ParagraphSpec, "ListElement"]] = field(default_factory=list)


@dataclass
class ListElement:
    kind = "list"
    geometry: Geometry = field(default_factory=Geometry)
    list_type: str = "bullet"
    items: List[ListItemSpec] = field(default_factory=list)

    @property
    def is_numbered(self) -> bool:
        # Anything that is not "bullet" numbers its items
        return self.list_type != "bullet"


@dataclass
class TableElement:
    kind = "table"
    geometry: Geometry = field(default_factory=Geometry)
    rows: List[RowSpec] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        """Columns come from the first row only."""
        return len(self.rows[0].cells) if self.rows else 0


@dataclass
class ChartElement:
    kind = "chart"
    geometry: Geometry = field(default_factory=Geometry)
    chart_type: str = "bar"
    data: Optional[str] = None  # "a,b;c,d" rows/columns block
    series: List[SeriesStyleSpec] = field(default_factory=list)

    @property
    def is_pie(self) -> bool:
        return self.chart_type.lower() == "pie"

    def data_rows(self) -> List[List[str]]:
        """Split the data block into trimmed cells, one list per row."""
        if self.data is None:
            return []
        return [[cell.strip() for cell in row.split(',')] for row in self.data.split(';')]


@dataclass
class ImageElement:
    kind = "image"
    geometry: Geometry = field(default_factory=Geometry)
    token: str = ""  # placeholder token, key into the placeholder mapping
    color: Optional[str] = None  # outline colour of the missing-image box
    caption: Optional[str] = None


ContentElement = Union[TextboxElement, ListElement, TableElement, ChartElement, ImageElement]


@dataclass
class SlideSpec:
    title: str = "Untitled"
    elements: List[ContentElement] = field(default_factory=list)
    layout: Optional[str] = None  # named custom layout hint


class RenderStatus(Enum):
    RENDERED = "rendered"
    DEGRADED = "degraded"
    FATAL = "fatal"


@dataclass
class ElementResult:
    """Outcome of rendering one element."""
    status: RenderStatus
    kind: str
    slide_index: int = 0
    reason: str = ""

    @classmethod
    def rendered(cls, kind: str) -> "ElementResult":
        return cls(RenderStatus.RENDERED, kind)

    @classmethod
    def degraded(cls, kind: str, reason: str) -> "ElementResult":
        return cls(RenderStatus.DEGRADED, kind, reason=reason)

    @classmethod
    def fatal(cls, kind: str, reason: str) -> "ElementResult":
        return cls(RenderStatus.FATAL, kind, reason=reason)


@dataclass
class GenerationReport:
    slide_count: int = 0
    results: List[ElementResult] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    output_path: Optional[str] = None

    @property
    def degraded(self) -> List[ElementResult]:
        return [r for r in self.results if r.status is not RenderStatus.RENDERED]
