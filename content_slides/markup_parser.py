"""
Markup parsing: XML, JSON and Markdown into a list of :class:`SlideSpec`.

All three formats end up in the same tree so the renderer never looks at
source syntax. XML is the full-fidelity format and is validated against a
fixed schema; JSON and Markdown are thinner front-ends onto the same model.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from lxml import etree
from markdown_it import MarkdownIt

from .errors import InvalidMarkupError
from .models import (
    CellSpec,
    ChartElement,
    ContentFormat,
    Geometry,
    ImageElement,
    ListElement,
    ListItemSpec,
    ParagraphSpec,
    RowSpec,
    RunSpec,
    SeriesStyleSpec,
    SlideSpec,
    TableElement,
    TextboxElement,
)

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200

# Fixed geometry for Markdown lines: left, top, width, height
MARKDOWN_TEXTBOX_GEOMETRY = ("100", "200", "500", "100")

PRESENTATION_XSD = """\
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:attributeGroup name="geometry">
    <xs:attribute name="left" type="xs:float"/>
    <xs:attribute name="top" type="xs:float"/>
    <xs:attribute name="width" type="xs:float"/>
    <xs:attribute name="height" type="xs:float"/>
    <xs:attribute name="placeholder" type="xs:string"/>
  </xs:attributeGroup>
  <xs:element name="presentation">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="slide" minOccurs="0" maxOccurs="unbounded">
          <xs:complexType>
            <xs:sequence minOccurs="0" maxOccurs="unbounded">
              <xs:element name="title" minOccurs="0" maxOccurs="1" type="xs:string"/>
              <xs:element name="textbox" minOccurs="0" maxOccurs="unbounded">
                <xs:complexType>
                  <xs:sequence minOccurs="0" maxOccurs="unbounded">
                    <xs:element name="p" minOccurs="0" maxOccurs="unbounded"/>
                    <xs:element name="list" minOccurs="0" maxOccurs="unbounded"/>
                  </xs:sequence>
                  <xs:attributeGroup ref="geometry"/>
                </xs:complexType>
              </xs:element>
              <xs:element name="list" minOccurs="0" maxOccurs="unbounded">
                <xs:complexType>
                  <xs:sequence minOccurs="0" maxOccurs="unbounded">
                    <xs:element name="item" minOccurs="0" maxOccurs="unbounded"/>
                  </xs:sequence>
                  <xs:attribute name="type" type="xs:string" use="required"/>
                  <xs:attributeGroup ref="geometry"/>
                </xs:complexType>
              </xs:element>
              <xs:element name="table" minOccurs="0" maxOccurs="unbounded">
                <xs:complexType>
                  <xs:sequence minOccurs="0" maxOccurs="unbounded">
                    <xs:element name="row" minOccurs="0" maxOccurs="unbounded"/>
                  </xs:sequence>
                  <xs:attributeGroup ref="geometry"/>
                </xs:complexType>
              </xs:element>
              <xs:element name="chart" minOccurs="0" maxOccurs="unbounded">
                <xs:complexType>
                  <xs:sequence minOccurs="0" maxOccurs="unbounded">
                    <xs:element name="data" minOccurs="0" maxOccurs="1" type="xs:string"/>
                    <xs:element name="series" minOccurs="0" maxOccurs="unbounded"/>
                  </xs:sequence>
                  <xs:attribute name="type" type="xs:string" use="required"/>
                  <xs:attributeGroup ref="geometry"/>
                </xs:complexType>
              </xs:element>
              <xs:element name="image" minOccurs="0" maxOccurs="unbounded">
                <xs:complexType mixed="true">
                  <xs:sequence>
                    <xs:element name="caption" minOccurs="0" maxOccurs="1" type="xs:string"/>
                  </xs:sequence>
                  <xs:attribute name="color" type="xs:string"/>
                  <xs:attributeGroup ref="geometry"/>
                </xs:complexType>
              </xs:element>
            </xs:sequence>
            <xs:attribute name="layout" type="xs:string"/>
          </xs:complexType>
        </xs:element>
      </xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""

_schema = None


def get_schema() -> etree.XMLSchema:
    """Compile the presentation schema once per process."""
    global _schema
    if _schema is None:
        _schema = etree.XMLSchema(etree.fromstring(PRESENTATION_XSD.encode('utf-8')))
    return _schema


def xml_parser() -> etree.XMLParser:
    """Parser that never expands entities or touches the network."""
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _snippet(text: str) -> str:
    return text[:SNIPPET_LENGTH]


def parse_markup(content: str, fmt, *, markdown_emphasis: bool = False) -> List[SlideSpec]:
    """
    Parse *content* in the given format into slide specs.

    Args:
        content: Raw markup text
        fmt: A :class:`ContentFormat` or its name (``"xml"``, ``"json"``, ``"md"`` ...)
        markdown_emphasis: Turn ``**bold**``, ``*italic*`` and ``++underline++`` in
            Markdown lines into styled runs instead of keeping each line verbatim

    Raises:
        InvalidMarkupError: Malformed markup or a schema violation
        UnsupportedFormatError: *fmt* is not a known format
    """
    content_format = ContentFormat.parse(fmt)
    if content_format is ContentFormat.XML:
        return parse_xml(content)
    if content_format is ContentFormat.JSON:
        return parse_json(content)
    return parse_markdown(content, emphasis=markdown_emphasis)


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------

def _children(element) -> list:
    """Element children, skipping comments and processing instructions."""
    return [child for child in element if isinstance(child.tag, str)]


def _geometry(element) -> Geometry:
    return Geometry(
        left=element.get('left'),
        top=element.get('top'),
        width=element.get('width'),
        height=element.get('height'),
        placeholder=element.get('placeholder'),
    )


def _text_nodes(element) -> List[str]:
    """Direct text nodes of *element* in document order (text, then each child's tail)."""
    nodes = [element.text] if element.text else []
    for child in element:
        if child.tail:
            nodes.append(child.tail)
    return nodes


def parse_xml(content: str) -> List[SlideSpec]:
    try:
        root = etree.fromstring(content.encode('utf-8'), xml_parser())
    except etree.XMLSyntaxError as e:
        logger.error("Malformed XML: %s | content: %s", e, _snippet(content))
        raise InvalidMarkupError(f"Malformed XML: {e}", snippet=_snippet(content)) from e

    schema = get_schema()
    if not schema.validate(root):
        error = schema.error_log.last_error
        logger.error("XML schema violation: %s | content: %s", error, _snippet(content))
        raise InvalidMarkupError(
            f"XML does not match the presentation schema: {error.message if error else 'unknown error'}",
            snippet=_snippet(content),
            schema_violation=True,
        )

    slides = []
    for slide_el in _children(root):
        slide = SlideSpec(layout=slide_el.get('layout'))
        for child in _children(slide_el):
            if child.tag == 'title':
                if child.text and child.text.strip():
                    slide.title = child.text
                continue
            element = _xml_element(child)
            if element is not None:
                slide.elements.append(element)
        slides.append(slide)

    logger.debug("Parsed %d slides from XML", len(slides))
    return slides


def _xml_element(el):
    tag = el.tag
    if tag == 'textbox':
        textbox = TextboxElement(geometry=_geometry(el))
        for child in _children(el):
            if child.tag == 'p':
                paragraph = _xml_paragraph(child)
                if paragraph is not None:
                    textbox.blocks.append(paragraph)
            elif child.tag == 'list':
                textbox.blocks.append(_xml_list(child))
        return textbox

    if tag == 'list':
        lst = _xml_list(el)
        lst.geometry = _geometry(el)
        return lst

    if tag == 'table':
        table = TableElement(geometry=_geometry(el))
        for row_el in _children(el):
            if row_el.tag != 'row':
                continue
            row = RowSpec()
            for cell_el in _children(row_el):
                if cell_el.tag != 'cell':
                    continue
                row.cells.append(CellSpec(
                    text=''.join(cell_el.itertext()),
                    style=cell_el.get('style', ''),
                    color=cell_el.get('color', ''),
                    font_size=cell_el.get('font-size', ''),
                ))
            table.rows.append(row)
        return table

    if tag == 'chart':
        chart = ChartElement(geometry=_geometry(el), chart_type=el.get('type', 'bar'))
        for child in _children(el):
            if child.tag == 'data':
                chart.data = child.text or ''
            elif child.tag == 'series':
                chart.series.append(SeriesStyleSpec(color=child.get('color', '')))
        return chart

    if tag == 'image':
        caption_el = el.find('caption')
        caption = caption_el.text if caption_el is not None else None
        return ImageElement(
            geometry=_geometry(el),
            token=''.join(_text_nodes(el)).strip(),
            color=el.get('color'),
            caption=caption.strip() if caption and caption.strip() else None,
        )

    logger.warning("Skipping unknown element <%s>", tag)
    return None


def _xml_paragraph(p_el) -> Optional[ParagraphSpec]:
    """Runs for every non-empty text node and ``<text>`` child; None when nothing is left."""
    paragraph = ParagraphSpec(
        style=p_el.get('style', ''),
        color=p_el.get('color', ''),
        font_size=p_el.get('font-size', ''),
    )

    def plain(text):
        if text:
            paragraph.runs.append(RunSpec(text, paragraph.style, paragraph.color, paragraph.font_size))

    plain(p_el.text)
    for child in p_el:
        if isinstance(child.tag, str) and child.tag == 'text':
            text = ''.join(child.itertext())
            if text:
                paragraph.runs.append(RunSpec(
                    text,
                    child.get('style', paragraph.style),
                    child.get('color', paragraph.color),
                    child.get('font-size', paragraph.font_size),
                ))
        plain(child.tail)

    return paragraph if paragraph.runs else None


def _xml_list(list_el) -> ListElement:
    lst = ListElement(list_type=list_el.get('type', 'bullet'))
    for item_el in _children(list_el):
        if item_el.tag != 'item':
            continue
        item = ListItemSpec()
        sub_elements = _children(item_el)
        if sub_elements:
            for child in sub_elements:
                if child.tag == 'p':
                    paragraph = _xml_paragraph(child)
                    if paragraph is not None:
                        item.paragraphs.append(paragraph)
                elif child.tag == 'list':
                    item.sublists.append(_xml_list(child))
        else:
            text = item_el.text or ''
            if text:
                style = item_el.get('style', '')
                color = item_el.get('color', '')
                font_size = item_el.get('font-size', '')
                item.paragraphs.append(ParagraphSpec(
                    runs=[RunSpec(text, style, color, font_size)],
                    style=style, color=color, font_size=font_size,
                ))
        lst.items.append(item)
    return lst


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _plain_paragraph(text: str) -> ParagraphSpec:
    return ParagraphSpec(runs=[RunSpec(text)])


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    return json.dumps(value) if isinstance(value, (list, dict)) else str(value)


def parse_json(content: str) -> List[SlideSpec]:
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.error("Malformed JSON: %s | content: %s", e, _snippet(content))
        raise InvalidMarkupError(f"Malformed JSON: {e}", snippet=_snippet(content)) from e

    if not isinstance(data, list):
        raise InvalidMarkupError("JSON content must be an array of slides", snippet=_snippet(content))

    slides = []
    for index, slide_obj in enumerate(data):
        if not isinstance(slide_obj, dict):
            raise InvalidMarkupError(f"Slide {index + 1} is not an object", snippet=_snippet(json.dumps(slide_obj)))

        title = slide_obj.get('title')
        slide = SlideSpec(
            title=_stringify(title) if title is not None else 'Untitled',
            layout=_stringify(slide_obj['layout']) if slide_obj.get('layout') is not None else None,
        )

        elements = slide_obj.get('elements') or []
        if not isinstance(elements, list):
            raise InvalidMarkupError(f"Slide {index + 1}: 'elements' must be an array")

        for element_obj in elements:
            element = _json_element(element_obj, index)
            if element is not None:
                slide.elements.append(element)
        slides.append(slide)

    logger.debug("Parsed %d slides from JSON", len(slides))
    return slides


def _json_element(obj: Any, slide_index: int):
    if not isinstance(obj, dict):
        raise InvalidMarkupError(f"Slide {slide_index + 1}: element is not an object", snippet=_snippet(json.dumps(obj)))

    kind = _stringify(obj.get('type') or 'textbox')
    attributes = obj.get('attributes') or {}
    if not isinstance(attributes, dict):
        raise InvalidMarkupError(f"Slide {slide_index + 1}: 'attributes' of a {kind} must be an object")
    attrs: Dict[str, str] = {str(key): _stringify(value) for key, value in attributes.items()}
    content = _stringify(obj.get('content'))

    geometry = Geometry(
        left=attrs.get('left'),
        top=attrs.get('top'),
        width=attrs.get('width'),
        height=attrs.get('height'),
        placeholder=attrs.get('placeholder'),
    )

    if kind == 'textbox':
        textbox = TextboxElement(geometry=geometry)
        if content:
            textbox.blocks.append(_plain_paragraph(content))
        return textbox
    if kind == 'list':
        lst = ListElement(geometry=geometry, list_type=attrs.get('type', 'bullet'))
        if content:
            lst.items.append(ListItemSpec(paragraphs=[_plain_paragraph(content)]))
        return lst
    if kind == 'table':
        table = TableElement(geometry=geometry)
        if content:
            for row in content.split(';'):
                table.rows.append(RowSpec(cells=[CellSpec(text=cell.strip()) for cell in row.split(',')]))
        return table
    if kind == 'chart':
        return ChartElement(geometry=geometry, chart_type=attrs.get('type', 'bar'), data=content or None)
    if kind == 'image':
        return ImageElement(geometry=geometry, token=content.strip(), color=attrs.get('color'))

    logger.warning("Skipping unknown element type %r on slide %d", kind, slide_index + 1)
    return None


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

_inline_md = MarkdownIt('commonmark', {'html': True})

UNDERLINE_PATTERN = re.compile(r'\+\+(.*?)\+\+')

# markdown-it inline token -> style flag it toggles
_STYLE_TOKENS = {
    'strong_open': ('bold', True),
    'strong_close': ('bold', False),
    'em_open': ('italic', True),
    'em_close': ('italic', False),
}


def inline_runs(text: str) -> List[RunSpec]:
    """
    Split one line of Markdown into styled runs.

    ``**bold**``, ``*italic*`` and ``++underline++`` (or ``<u>``) become run styles;
    links and code spans keep their text. Adjacent pieces with the same style
    are merged, so a plain line is a single unstyled run.
    """
    active = {'bold': False, 'italic': False, 'underline': False}
    runs: List[RunSpec] = []

    def emit(piece: str):
        if not piece:
            return
        style = '-'.join(flag for flag in ('bold', 'italic', 'underline') if active[flag])
        if runs and runs[-1].style == style:
            runs[-1].text += piece
        else:
            runs.append(RunSpec(piece, style))

    source = UNDERLINE_PATTERN.sub(r'<u>\1</u>', text)
    for block in _inline_md.parseInline(source):
        for token in block.children or []:
            if token.type in _STYLE_TOKENS:
                flag, state = _STYLE_TOKENS[token.type]
                active[flag] = state
            elif token.type == 'html_inline' and token.content.lower() in ('<u>', '</u>'):
                active['underline'] = not token.content.startswith('</')
            elif token.type in ('text', 'text_special', 'code_inline', 'html_inline'):
                emit(token.content)
            elif token.type == 'image':
                emit(token.content)
            elif token.type in ('softbreak', 'hardbreak'):
                emit(' ')

    return runs or [RunSpec(text)]


def parse_markdown(content: str, emphasis: bool = False) -> List[SlideSpec]:
    """
    One slide per ``# `` line, one textbox per other non-blank line.

    Lines are kept verbatim (trimmed) unless *emphasis* is set, in which case
    they go through :func:`inline_runs`.
    """
    slides: List[SlideSpec] = []
    current: Optional[SlideSpec] = None
    dropped = 0

    for line in content.split('\n'):
        if line.startswith('# '):
            current = SlideSpec(title=line[2:].strip())
            slides.append(current)
        elif line.strip():
            if current is None:
                dropped += 1
                continue
            text = line.strip()
            runs = inline_runs(text) if emphasis else [RunSpec(text)]
            left, top, width, height = MARKDOWN_TEXTBOX_GEOMETRY
            current.elements.append(TextboxElement(
                geometry=Geometry(left=left, top=top, width=width, height=height),
                blocks=[ParagraphSpec(runs=runs)],
            ))

    if dropped:
        logger.info("Dropped %d Markdown lines before the first '# ' title", dropped)
    logger.debug("Parsed %d slides from Markdown", len(slides))
    return slides
