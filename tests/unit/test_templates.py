"""
Tests for opening corporate templates and copying their footer.
"""
import tempfile
import zipfile

import pytest
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import PP_PLACEHOLDER
from pptx.util import Pt

from content_slides.templates import (
    CONTENT_TYPES_PART,
    PRESENTATION_MAIN_CT,
    TEMPLATE_MAIN_CT,
    FooterInfo,
    apply_footer,
    convert_potx,
    open_template,
    read_footer,
)


def master_footer(prs):
    return next(s for s in prs.slide_master.placeholders if s.placeholder_format.type == PP_PLACEHOLDER.FOOTER)


@pytest.fixture
def template_pptx(tmp_path):
    """A .pptx with two slides and a footer on the master."""
    prs = Presentation()
    prs.slides.add_slide(prs.slide_layouts[0])
    prs.slides.add_slide(prs.slide_layouts[1])
    footer = master_footer(prs)
    footer.text_frame.text = "ACME Confidential"
    run = footer.text_frame.paragraphs[0].runs[0]
    run.font.size = Pt(9)
    run.font.color.rgb = RGBColor(0x12, 0x34, 0x56)
    path = tmp_path / "corporate.pptx"
    prs.save(str(path))
    return path


@pytest.fixture
def template_potx(tmp_path, template_pptx):
    """The same deck repackaged with the template content type."""
    path = tmp_path / "corporate.potx"
    with zipfile.ZipFile(template_pptx) as src, zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == CONTENT_TYPES_PART:
                data = data.replace(PRESENTATION_MAIN_CT.encode(), TEMPLATE_MAIN_CT.encode())
            dst.writestr(item, data)
    return path


def test_convert_potx(tmp_path, template_potx):
    dest = tmp_path / "converted.pptx"
    convert_potx(template_potx, dest)
    with zipfile.ZipFile(dest) as converted:
        content_types = converted.read(CONTENT_TYPES_PART).decode()
    assert PRESENTATION_MAIN_CT in content_types
    assert TEMPLATE_MAIN_CT not in content_types


def test_open_pptx_template_drops_slides(template_pptx, tmp_path):
    prs = open_template(template_pptx)
    assert len(prs.slides) == 0
    assert len(prs.slide_layouts) == 11

    prs.slides.add_slide(prs.slide_layouts[6])
    out = tmp_path / "out.pptx"
    prs.save(str(out))
    assert len(Presentation(str(out)).slides) == 1


def test_open_potx_template_cleans_up(template_potx, tmp_path, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))

    prs = open_template(template_potx)
    assert len(prs.slides) == 0
    assert any(layout.name == "Title and Content" for layout in prs.slide_layouts)
    assert list(scratch.iterdir()) == []


def test_read_footer(template_pptx):
    info = read_footer(Presentation(str(template_pptx)))
    assert info.text == "ACME Confidential"
    assert info.size == 9.0
    assert info.color == RGBColor(0x12, 0x34, 0x56)
    assert info.width > 0 and info.height > 0


def test_blank_footer_is_ignored():
    assert read_footer(Presentation()) is None


def test_apply_footer(blank_slide):
    info = FooterInfo(text="Page footer", size=10, left=Pt(20), top=Pt(500), width=Pt(300), height=Pt(20))
    apply_footer(blank_slide, info)

    shape = blank_slide.shapes[0]
    assert shape.name == "Footer"
    assert (shape.left, shape.top) == (Pt(20), Pt(500))
    run = shape.text_frame.paragraphs[0].runs[0]
    assert run.text == "Page footer"
    assert run.font.size == Pt(10)
    assert run.font.color.rgb == RGBColor(0, 0, 0)
