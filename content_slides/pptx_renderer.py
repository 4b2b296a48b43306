#!/usr/bin/env python3
"""
PowerPoint renderer for converting parsed slide specs to python-pptx shapes.

Every element is rendered on its own: a failure in one element's primary
path is logged, replaced by a visible stand-in shape and reported as a
degraded :class:`ElementResult`, and the rest of the slide carries on.
"""
import logging
import os
from typing import Dict, List, Mapping, Optional, Tuple

from PIL import Image
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_AUTO_SIZE, PP_ALIGN
from pptx.oxml.xmlchemy import OxmlElement
from pptx.oxml.ns import qn
from pptx.util import Pt

from .charts import add_chart_picture, tabulate
from .css_utils import CSSParser, parse_color
from .errors import RenderingDegradation
from .geometry import element_rect, slot_rect
from .layout_resolver import NEW_SHAPE, Target, add_slide, find_title_slot, resolve_target
from .models import (
    ChartElement,
    ElementResult,
    GeometryRect,
    ImageElement,
    ListElement,
    ParagraphSpec,
    RenderStatus,
    RunSpec,
    SlideSpec,
    TableElement,
    TextboxElement,
)

logger = logging.getLogger(__name__)

BLACK = RGBColor(0, 0, 0)
MAX_LIST_LEVEL = 8
BULLET_INDENT_PT = 18
BULLET_CHAR = "•"

CHART_TYPES = {
    'bar': XL_CHART_TYPE.COLUMN_CLUSTERED,
    'line': XL_CHART_TYPE.LINE,
    'pie': XL_CHART_TYPE.PIE,
}
CHART_FAILED_TEXT = "Chart Placeholder (Generation Failed)"

# Native pixel size -> points, same 96 DPI convention as slide geometry
PX_TO_PT = 72 / 96


class ImageDimensionCache:
    """Cache for image dimensions to avoid repeated PIL Image.open calls."""

    def __init__(self):
        self.cache: Dict[str, Tuple[int, int]] = {}

    def get_dimensions(self, image_path: str) -> Tuple[int, int]:
        """Pixel ``(width, height)`` of an image; raises if Pillow cannot read it."""
        if image_path not in self.cache:
            with Image.open(image_path) as img:
                self.cache[image_path] = img.size
        return self.cache[image_path]


class _ParagraphSink:
    """
    Hands out paragraphs of a text frame in order.

    The frame's existing first paragraph is used before any new one is added,
    so a frame never ends with an empty trailing paragraph.
    """

    def __init__(self, text_frame):
        self.text_frame = text_frame
        self._started = False

    def next(self):
        if not self._started:
            self._started = True
            return self.text_frame.paragraphs[0]
        return self.text_frame.add_paragraph()


class PPTXRenderer:
    """
    Renderer for converting slide specs to PowerPoint slides.
    """

    def __init__(self, theme: str = "default", debug: bool = False, use_theme_font: bool = True):
        """Initialize the PowerPoint renderer with theme support."""
        self.theme = theme
        self.debug = debug
        self.theme_config = CSSParser(theme).get_theme_settings()
        # Template decks keep their own fonts
        self.font_family: Optional[str] = self.theme_config['font_family'] if use_theme_font else None
        self.image_cache = ImageDimensionCache()
        self._handlers = {
            TextboxElement: self._render_textbox,
            ListElement: self._render_list,
            TableElement: self._render_table,
            ChartElement: self._render_chart,
            ImageElement: self._render_image,
        }

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    def render_slide(self, prs, spec: SlideSpec, mapping: Mapping[str, str], slide_index: int = 0):
        """Add one slide for *spec* and render its title and elements in order."""
        slide = add_slide(prs, spec.layout)
        slide_size = (prs.slide_width.pt, prs.slide_height.pt)
        self.render_title(slide, spec.title)

        results: List[ElementResult] = []
        for element in spec.elements:
            target = resolve_target(slide, element)
            result = self.render_element(slide, element, target, mapping, slide_size=slide_size)
            result.slide_index = slide_index
            results.append(result)

        if self.debug:
            logger.info("Slide %d: %r with %d elements", slide_index + 1, spec.title, len(results))
        return slide, results

    def render_title(self, slide, title: str) -> None:
        if not title:
            return

        slot = find_title_slot(slide)
        if slot is not None:
            text_frame = slot.text_frame
        else:
            box = self.theme_config['title_box']
            shape = slide.shapes.add_textbox(Pt(box['left']), Pt(box['top']), Pt(box['width']), Pt(box['height']))
            text_frame = shape.text_frame
            text_frame.word_wrap = True

        text_frame.clear()
        run = text_frame.paragraphs[0].add_run()
        run.text = title
        run.font.size = Pt(self.theme_config['title_font_size'])
        run.font.bold = True
        if self.font_family and slot is None:
            run.font.name = self.font_family

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def render_element(
        self,
        slide,
        element,
        target: Target = NEW_SHAPE,
        mapping: Optional[Mapping[str, str]] = None,
        slide_size: Optional[Tuple[float, float]] = None,
    ) -> ElementResult:
        """
        Render *element* onto *slide* at *target*.

        Never raises for element-level problems: the result says whether the
        element was rendered, degraded to a stand-in, or lost entirely.
        """
        mapping = mapping or {}
        width, height = slide_size or (self.theme_config['slide_width'], self.theme_config['slide_height'])
        if target.is_slot:
            rect = slot_rect(target.slot)
        else:
            rect = element_rect(element.geometry, element.kind, width, height)

        handler = self._handlers.get(type(element))
        if handler is None:
            return ElementResult.fatal(getattr(element, 'kind', '?'), f"No renderer for {type(element).__name__}")

        try:
            return handler(slide, element, target, rect, mapping)
        except Exception as e:
            logger.error("Failed to render %s at %s: %s", element.kind, rect, e, exc_info=self.debug)
            try:
                self._add_outline_box(slide, rect, f"{element.kind.capitalize()} Placeholder (Generation Failed)")
            except Exception as fallback_error:
                logger.error("Fallback for %s failed too: %s", element.kind, fallback_error)
                return ElementResult.fatal(element.kind, f"{e}; fallback: {fallback_error}")
            return ElementResult.degraded(element.kind, str(e))

    def _text_frame_for(self, slide, target: Target, rect: GeometryRect):
        """Cleared text frame of the target slot, or of a new word-wrapped textbox."""
        if target.is_slot and getattr(target.slot, 'has_text_frame', False):
            text_frame = target.slot.text_frame
            text_frame.clear()
            return text_frame

        shape = slide.shapes.add_textbox(Pt(rect.left), Pt(rect.top), Pt(rect.width), Pt(rect.height))
        text_frame = shape.text_frame
        text_frame.word_wrap = True
        return text_frame

    def _render_textbox(self, slide, element: TextboxElement, target, rect, mapping) -> ElementResult:
        if self.debug:
            preview = " ".join(block.text for block in element.blocks if isinstance(block, ParagraphSpec))
            logger.info("Textbox %r at %s", preview[:60], rect)
        sink = _ParagraphSink(self._text_frame_for(slide, target, rect))
        for block in element.blocks:
            if isinstance(block, ListElement):
                self._write_list(sink, block, 0)
            else:
                self._write_paragraph(sink.next(), block)
        return ElementResult.rendered(element.kind)

    def _render_list(self, slide, element: ListElement, target, rect, mapping) -> ElementResult:
        sink = _ParagraphSink(self._text_frame_for(slide, target, rect))
        self._write_list(sink, element, 0)
        return ElementResult.rendered(element.kind)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _write_paragraph(self, paragraph, spec: ParagraphSpec) -> None:
        for run_spec in spec.runs:
            self._add_run(paragraph, run_spec)

    def _add_run(self, paragraph, spec: RunSpec):
        run = paragraph.add_run()
        run.text = spec.text
        self._format_run(run, spec.style, spec.color, spec.font_size)
        return run

    def _format_run(self, run, style: str, color: str, font_size: str) -> None:
        """Apply style flags, integer font size and colour (black when unset or unparseable)."""
        style = style or ''
        font = run.font
        font.bold = 'bold' in style
        font.italic = 'italic' in style
        font.underline = 'underline' in style

        size = _int_or_none(font_size)
        if size is not None and size > 0:
            font.size = Pt(size)

        font.color.rgb = parse_color(color) or BLACK
        if self.font_family:
            font.name = self.font_family

    def _write_list(self, sink: _ParagraphSink, lst: ListElement, indent: int) -> None:
        level = min(indent, MAX_LIST_LEVEL)
        for item in lst.items:
            for spec in item.paragraphs or [None]:
                paragraph = sink.next()
                if spec is not None:
                    self._write_paragraph(paragraph, spec)
                self._set_bullet(paragraph, level, lst.is_numbered)
            for sublist in item.sublists:
                self._write_list(sink, sublist, indent + 1)

    def _set_bullet(self, paragraph, level: int, numbered: bool) -> None:
        """Give *paragraph* a native bullet (``•``) or auto-number (``1.``) at *level*."""
        paragraph.level = level
        pPr = paragraph._p.get_or_add_pPr()
        for tag in ('a:buNone', 'a:buAutoNum', 'a:buChar', 'a:buFont'):
            existing = pPr.find(qn(tag))
            if existing is not None:
                pPr.remove(existing)

        pPr.set('marL', str(int(Pt(BULLET_INDENT_PT * (level + 1)))))
        pPr.set('indent', str(-int(Pt(BULLET_INDENT_PT))))

        if numbered:
            bullet = OxmlElement('a:buAutoNum')
            bullet.set('type', 'arabicPeriod')
            pPr.insert_element_before(bullet, 'a:tabLst', 'a:defRPr', 'a:extLst')
        else:
            bu_font = OxmlElement('a:buFont')
            bu_font.set('typeface', 'Arial')
            pPr.insert_element_before(bu_font, 'a:tabLst', 'a:defRPr', 'a:extLst')
            bullet = OxmlElement('a:buChar')
            bullet.set('char', BULLET_CHAR)
            pPr.insert_element_before(bullet, 'a:tabLst', 'a:defRPr', 'a:extLst')

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _render_table(self, slide, element: TableElement, target, rect, mapping) -> ElementResult:
        rows = len(element.rows)
        cols = element.column_count
        if rows == 0 or cols == 0:
            logger.info("Table with %d rows and %d columns has nothing to render", rows, cols)
            return ElementResult(RenderStatus.RENDERED, element.kind, reason="empty table")

        shape = slide.shapes.add_table(rows, cols, Pt(rect.left), Pt(rect.top), Pt(rect.width), Pt(rect.height))
        table = shape.table
        for r, row in enumerate(element.rows):
            # Columns come from the first row; extra cells are dropped
            for c, cell in enumerate(row.cells[:cols]):
                if not cell.text:
                    continue
                run = table.cell(r, c).text_frame.paragraphs[0].add_run()
                run.text = cell.text
                self._format_run(run, cell.style, cell.color, cell.font_size)

        if self.debug:
            logger.info("Table %dx%d at %s", rows, cols, rect)
        return ElementResult.rendered(element.kind)

    # ------------------------------------------------------------------
    # Charts
    # ------------------------------------------------------------------

    def _render_chart(self, slide, element: ChartElement, target, rect, mapping) -> ElementResult:
        left, top, width, height = Pt(rect.left), Pt(rect.top), Pt(rect.width), Pt(rect.height)
        table = tabulate(element)

        try:
            if table.is_empty:
                raise RenderingDegradation(f"No usable data in {element.chart_type} chart")
            chart_data = CategoryChartData()
            chart_data.categories = table.categories
            for name, values in table.series:
                chart_data.add_series(name, values)
            chart_type = CHART_TYPES.get(element.chart_type.lower(), XL_CHART_TYPE.COLUMN_CLUSTERED)
            graphic_frame = slide.shapes.add_chart(chart_type, left, top, width, height, chart_data)
        except Exception as e:
            logger.error("Native chart creation failed: %s; falling back to picture chart", e)
            try:
                add_chart_picture(slide, element, table, left, top, width, height, dpi=self.theme_config['chart_dpi'])
                return ElementResult.degraded(element.kind, f"native chart failed ({e}); drawn as picture")
            except Exception as picture_error:
                logger.error("Picture chart fallback failed: %s", picture_error)
                self._add_outline_box(slide, rect, CHART_FAILED_TEXT)
                return ElementResult.degraded(element.kind, f"chart generation failed: {picture_error}")

        self._color_series(graphic_frame.chart, element)
        return ElementResult.rendered(element.kind)

    def _color_series(self, chart, element: ChartElement) -> None:
        """Apply ``<series color>`` values to the chart's series in declaration order."""
        plot_series = list(chart.plots[0].series) if chart.plots else []
        for index, spec in enumerate(element.series, start=1):
            rgb = parse_color(spec.color)
            if rgb is None:
                continue
            if index > len(plot_series):
                logger.warning("Series %d has a color but the chart only has %d series", index, len(plot_series))
                break
            try:
                fmt = plot_series[index - 1].format
                fmt.fill.solid()
                fmt.fill.fore_color.rgb = rgb
                if element.chart_type.lower() == 'line':
                    fmt.line.color.rgb = rgb
            except (AttributeError, ValueError, TypeError) as e:
                logger.warning("Could not color series %d: %s", index, e)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def _render_image(self, slide, element: ImageElement, target, rect, mapping) -> ElementResult:
        if self.debug:
            logger.info("Adding image %r at %s", element.token, rect)

        picture = None
        reason = ""
        path = mapping.get(element.token)
        if not path:
            reason = f"no file for placeholder {element.token!r}"
        elif not os.path.isfile(path):
            reason = f"image file not found: {path}"
        else:
            try:
                picture = self._add_scaled_picture(slide, path, rect)
            except Exception as e:
                logger.error("Failed to add image from %s: %s", path, e)
                reason = f"could not place image {path}: {e}"

        if picture is None:
            self._image_fallback(slide, element, rect)

        if element.caption:
            self._add_caption(slide, element.caption, rect)

        if picture is None:
            return ElementResult.degraded(element.kind, reason)
        return ElementResult.rendered(element.kind)

    def _add_scaled_picture(self, slide, path: str, rect: GeometryRect):
        """Place the image at the box origin, shrunk to fit and never enlarged."""
        px_width, px_height = self.image_cache.get_dimensions(path)
        if not px_width or not px_height:
            raise RenderingDegradation(f"Image {path} has no size")

        natural_w = px_width * PX_TO_PT
        natural_h = px_height * PX_TO_PT
        scale = min(1.0, rect.width / natural_w, rect.height / natural_h)
        return slide.shapes.add_picture(
            path, Pt(rect.left), Pt(rect.top), Pt(natural_w * scale), Pt(natural_h * scale),
        )

    def _image_fallback(self, slide, element: ImageElement, rect: GeometryRect) -> None:
        color = element.color or self.theme_config['image_outline_color']
        box = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Pt(rect.left), Pt(rect.top), Pt(rect.width), Pt(rect.height))
        box.fill.background()
        box.line.color.rgb = parse_color(color) or parse_color(self.theme_config['image_outline_color']) or BLACK

        if not element.token:
            return

        label = slide.shapes.add_textbox(
            Pt(rect.left + rect.width / 4),
            Pt(rect.top + rect.height / 2 - 20),
            Pt(rect.width / 2),
            Pt(40),
        )
        text_frame = label.text_frame
        text_frame.word_wrap = True
        text_frame.auto_size = MSO_AUTO_SIZE.SHAPE_TO_FIT_TEXT
        paragraph = text_frame.paragraphs[0]
        paragraph.alignment = PP_ALIGN.CENTER
        run = paragraph.add_run()
        run.text = f"Add {element.token}"
        run.font.size = Pt(self.theme_config['image_label_font_size'])
        run.font.color.rgb = BLACK
        label.fill.background()
        label.line.fill.background()

    def _add_caption(self, slide, caption: str, rect: GeometryRect) -> None:
        """Bold caption to the left of the image; skipped when there is no room."""
        width = rect.left - 60
        if width <= 0:
            logger.info("No room for caption left of image at %s", rect)
            return
        try:
            shape = slide.shapes.add_textbox(Pt(50), Pt(rect.top), Pt(width), Pt(rect.height))
            text_frame = shape.text_frame
            text_frame.word_wrap = True
            text_frame.auto_size = MSO_AUTO_SIZE.SHAPE_TO_FIT_TEXT
            run = text_frame.paragraphs[0].add_run()
            run.text = caption
            run.font.size = Pt(self.theme_config['caption_font_size'])
            run.font.bold = True
        except Exception as e:
            logger.error("Failed to add caption: %s", e)

    # ------------------------------------------------------------------
    # Fallback shapes
    # ------------------------------------------------------------------

    def _add_outline_box(self, slide, rect: GeometryRect, text: str):
        """Unfilled rectangle with a visible outline and a message."""
        box = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Pt(rect.left), Pt(rect.top), Pt(rect.width), Pt(rect.height))
        box.fill.background()
        box.line.color.rgb = BLACK
        box.text_frame.text = text
        box.text_frame.paragraphs[0].runs[0].font.color.rgb = BLACK
        return box


def _int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None
