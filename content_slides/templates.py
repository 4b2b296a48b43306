"""
Corporate template support.

A template (``.pptx`` or ``.potx``) becomes the base presentation: its
masters and layouts are kept, its slides are dropped. The master footer
text is remembered and copied onto every generated slide.
"""
import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_COLOR_TYPE
from pptx.enum.shapes import PP_PLACEHOLDER
from pptx.util import Pt

from .paths import temp_path

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = '[Content_Types].xml'
TEMPLATE_MAIN_CT = 'application/vnd.openxmlformats-officedocument.presentationml.template.main+xml'
PRESENTATION_MAIN_CT = 'application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml'

DEFAULT_FOOTER_SIZE = 12.0


@dataclass
class FooterInfo:
    """Footer text and formatting taken from a template's slide master."""
    text: str = ""
    size: float = DEFAULT_FOOTER_SIZE
    color: Optional[RGBColor] = None
    left: int = 0  # EMU
    top: int = 0
    width: int = 0
    height: int = 0


def convert_potx(template_path: Union[str, Path], dest_path: Union[str, Path]) -> None:
    """Copy a ``.potx`` package to *dest_path*, retyped as a regular presentation."""
    with zipfile.ZipFile(template_path) as src, zipfile.ZipFile(dest_path, 'w', zipfile.ZIP_DEFLATED) as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == CONTENT_TYPES_PART:
                data = data.replace(TEMPLATE_MAIN_CT.encode('utf-8'), PRESENTATION_MAIN_CT.encode('utf-8'))
            dst.writestr(item, data)


def open_template(template_path: Union[str, Path]):
    """
    Open *template_path* as a python-pptx Presentation with no slides.

    ``.potx`` files are converted through a temporary copy that is always
    removed afterwards.
    """
    template_path = Path(template_path)
    if template_path.suffix.lower() == '.potx':
        with temp_path(suffix=".pptx") as tmp_path:
            convert_potx(template_path, tmp_path)
            prs = Presentation(str(tmp_path))
    else:
        prs = Presentation(str(template_path))

    _drop_slides(prs)
    logger.info("Using template %s (%d layouts)", template_path, len(prs.slide_layouts))
    return prs


def _drop_slides(prs) -> None:
    sld_id_lst = prs.slides._sldIdLst
    for sld_id in list(sld_id_lst):
        prs.part.drop_rel(sld_id.rId)
        sld_id_lst.remove(sld_id)


def read_footer(prs) -> Optional[FooterInfo]:
    """Footer placeholder of the slide master, or None when it holds no text."""
    try:
        for shape in prs.slide_master.placeholders:
            if shape.placeholder_format.type != PP_PLACEHOLDER.FOOTER:
                continue
            text = shape.text_frame.text
            if not text.strip():
                return None

            info = FooterInfo(
                text=text,
                left=shape.left or 0,
                top=shape.top or 0,
                width=shape.width or 0,
                height=shape.height or 0,
            )
            runs = [run for p in shape.text_frame.paragraphs for run in p.runs]
            if runs:
                font = runs[0].font
                if font.size is not None:
                    info.size = font.size.pt
                if font.color.type == MSO_COLOR_TYPE.RGB:
                    info.color = font.color.rgb
            return info
    except (AttributeError, ValueError) as e:
        logger.error("Failed to extract footer info from template: %s", e)
    return None


def apply_footer(slide, info: FooterInfo) -> None:
    """Add a textbox carrying the template footer to *slide*."""
    shape = slide.shapes.add_textbox(info.left, info.top, info.width, info.height)
    shape.name = "Footer"
    tf = shape.text_frame
    tf.word_wrap = True
    run = tf.paragraphs[0].add_run()
    run.text = info.text
    run.font.size = Pt(info.size)
    run.font.color.rgb = info.color if info.color is not None else RGBColor(0, 0, 0)
