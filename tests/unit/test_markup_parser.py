#!/usr/bin/env python3
"""
Tests for XML, JSON and Markdown parsing into slide specs.
"""

import json

import pytest

from content_slides.errors import InvalidMarkupError, UnsupportedFormatError
from content_slides.markup_parser import inline_runs, parse_markup
from content_slides.models import (
    ChartElement,
    ContentFormat,
    ImageElement,
    ListElement,
    ParagraphSpec,
    TableElement,
    TextboxElement,
)


class TestXML:
    """XML is schema validated and carries the full element model."""

    def test_hello_round_trip(self):
        xml = "<presentation><slide><textbox><p>Hello</p></textbox></slide></presentation>"
        slides = parse_markup(xml, ContentFormat.XML)

        assert len(slides) == 1
        slide = slides[0]
        assert slide.title == "Untitled"
        assert len(slide.elements) == 1
        textbox = slide.elements[0]
        assert isinstance(textbox, TextboxElement)
        assert len(textbox.blocks) == 1
        runs = textbox.blocks[0].runs
        assert len(runs) == 1
        assert runs[0].text == "Hello"
        assert runs[0].style == "" and runs[0].color == "" and runs[0].font_size == ""

    def test_run_attributes_override_paragraph(self):
        xml = """
        <presentation><slide><title>Styles</title>
          <textbox left="10" top="20" width="300" height="50" placeholder="body">
            <p style="italic" color="#FF0000" font-size="18">Plain <text style="bold">Loud</text><text color="blue">Blue</text></p>
            <p></p>
          </textbox>
        </slide></presentation>
        """
        slide = parse_markup(xml, "xml")[0]
        assert slide.title == "Styles"
        textbox = slide.elements[0]
        assert textbox.geometry.left == "10"
        assert textbox.geometry.placeholder == "body"
        assert len(textbox.blocks) == 1  # empty paragraph dropped

        plain, loud, blue = textbox.blocks[0].runs
        assert (plain.text, plain.style, plain.color, plain.font_size) == ("Plain ", "italic", "#FF0000", "18")
        assert (loud.text, loud.style, loud.color, loud.font_size) == ("Loud", "bold", "#FF0000", "18")
        assert (blue.text, blue.style, blue.color) == ("Blue", "italic", "blue")
        assert loud.bold and not loud.italic

    def test_nested_lists(self):
        xml = """
        <presentation><slide>
          <list type="number">
            <item style="bold">First</item>
            <item><p>Second</p><list type="bullet"><item>Nested</item></list></item>
          </list>
        </slide></presentation>
        """
        lst = parse_markup(xml, "XML")[0].elements[0]
        assert isinstance(lst, ListElement)
        assert lst.is_numbered
        first, second = lst.items
        assert first.paragraphs[0].runs[0].text == "First"
        assert first.paragraphs[0].runs[0].style == "bold"
        assert second.paragraphs[0].text == "Second"
        assert len(second.sublists) == 1
        assert not second.sublists[0].is_numbered
        assert second.sublists[0].items[0].paragraphs[0].text == "Nested"

    def test_table_chart_and_image(self):
        xml = """
        <presentation><slide layout="Title Only">
          <table><row><cell style="bold">A</cell><cell>B</cell></row><row><cell>1</cell></row></table>
          <chart type="pie"><data>A,10;B,20</data><series color="red"/><series/></chart>
          <image left="300" color="green">[Insert Image: Logo]<caption>Our logo</caption></image>
        </slide></presentation>
        """
        slide = parse_markup(xml, "xml")[0]
        assert slide.layout == "Title Only"
        table, chart, image = slide.elements

        assert isinstance(table, TableElement)
        assert table.column_count == 2
        assert [c.text for c in table.rows[1].cells] == ["1"]
        assert table.rows[0].cells[0].style == "bold"

        assert isinstance(chart, ChartElement)
        assert chart.is_pie
        assert chart.data == "A,10;B,20"
        assert [s.color for s in chart.series] == ["red", ""]

        assert isinstance(image, ImageElement)
        assert image.token == "[Insert Image: Logo]"
        assert image.caption == "Our logo"
        assert image.color == "green"

    @pytest.mark.parametrize("xml", [
        "<presentation><slide><list><item>x</item></list></slide></presentation>",          # list type missing
        "<presentation><slide><chart><data>1</data></chart></slide></presentation>",        # chart type missing
        "<presentation><slide><textbox left=\"ten\"/></slide></presentation>",             # not a float
        "<presentation><slide><video/></slide></presentation>",                              # unknown element
        "<deck><slide/></deck>",                                                             # wrong root
    ])
    def test_schema_violations(self, xml):
        with pytest.raises(InvalidMarkupError) as exc_info:
            parse_markup(xml, "xml")
        assert exc_info.value.schema_violation is True

    def test_malformed_xml(self):
        with pytest.raises(InvalidMarkupError) as exc_info:
            parse_markup("<presentation><slide>", "xml")
        assert exc_info.value.schema_violation is False
        assert exc_info.value.snippet == "<presentation><slide>"


class TestJSON:
    """JSON maps each element's content string onto the same model."""

    def test_elements_by_type(self):
        data = [{
            "title": "Quarter",
            "elements": [
                {"content": "Default is a textbox", "attributes": {"left": 50, "top": "60"}},
                {"type": "list", "attributes": {"type": "number"}, "content": "Only item"},
                {"type": "table", "content": "a, b;c,d"},
                {"type": "chart", "attributes": {"type": "line"}, "content": "x,1,2;s,3,4"},
                {"type": "image", "attributes": {"color": "blue"}, "content": "[Insert Image: Logo]"},
                {"type": "hologram", "content": "skipped"},
            ],
        }]
        slide = parse_markup(json.dumps(data), "json")[0]
        assert slide.title == "Quarter"
        textbox, lst, table, chart, image = slide.elements

        assert textbox.geometry.left == "50"
        assert textbox.blocks[0].text == "Default is a textbox"
        assert lst.is_numbered and lst.items[0].paragraphs[0].text == "Only item"
        assert [[c.text for c in row.cells] for row in table.rows] == [["a", "b"], ["c", "d"]]
        assert chart.chart_type == "line" and chart.data == "x,1,2;s,3,4"
        assert image.token == "[Insert Image: Logo]" and image.color == "blue"

    def test_missing_title_is_untitled(self):
        slides = parse_markup('[{"elements": []}, {}]', "json")
        assert [s.title for s in slides] == ["Untitled", "Untitled"]
        assert all(s.elements == [] for s in slides)

    @pytest.mark.parametrize("text", [
        '{"title": "not an array"}',
        '42',
        '["not an object"]',
        '[{"elements": "nope"}]',
        '[{"elements": [42]}]',
        '[{"elements": [{"type": "textbox", "attributes": [1, 2]}]}]',
        '[{"title": ',
    ])
    def test_malformed_structure(self, text):
        with pytest.raises(InvalidMarkupError):
            parse_markup(text, "json")


class TestMarkdown:
    """Markdown: '# ' lines start slides, every other line is a textbox."""

    def test_two_slides(self):
        slides = parse_markup("Preamble is dropped\n# Title1\nLine A\n# Title2\nLine B", "markdown")

        assert [s.title for s in slides] == ["Title1", "Title2"]
        for slide, text in zip(slides, ["Line A", "Line B"]):
            assert len(slide.elements) == 1
            textbox = slide.elements[0]
            assert isinstance(textbox, TextboxElement)
            assert len(textbox.blocks) == 1
            assert textbox.blocks[0].text == text
            g = textbox.geometry
            assert (g.left, g.top, g.width, g.height) == ("100", "200", "500", "100")

    def test_blank_lines_and_crlf(self):
        slides = parse_markup("# Only  \r\n\r\n   \r\n  indented line  \r\n", "md")
        assert slides[0].title == "Only"
        assert len(slides[0].elements) == 1
        assert slides[0].elements[0].blocks[0].text == "indented line"

    def test_no_title_means_no_slides(self):
        assert parse_markup("just text\nmore text", "md") == []

    def test_lines_are_kept_verbatim(self):
        line = r"See [docs](https://example.com) and AT&amp;T use 2*3*4 \*not\* **bold**"
        slides = parse_markup(f"# T\n  {line}  ", "md")
        runs = slides[0].elements[0].blocks[0].runs
        assert len(runs) == 1
        assert runs[0].text == line
        assert runs[0].style == ""

    def test_emphasis_is_opt_in(self):
        slides = parse_markup("# T\nPlain **bold** ++under++", "md", markdown_emphasis=True)
        runs = slides[0].elements[0].blocks[0].runs
        assert [(r.text, r.style) for r in runs] == [
            ("Plain ", ""),
            ("bold", "bold"),
            (" ", ""),
            ("under", "underline"),
        ]

    def test_emphasis_flag_ignored_for_other_formats(self):
        xml = "<presentation><slide><textbox><p>a **b**</p></textbox></slide></presentation>"
        slide = parse_markup(xml, "xml", markdown_emphasis=True)[0]
        assert slide.elements[0].blocks[0].runs[0].text == "a **b**"

    def test_inline_runs(self):
        runs = inline_runs("Plain **bold** *it* ++under++ end")
        assert [(r.text, r.style) for r in runs] == [
            ("Plain ", ""),
            ("bold", "bold"),
            (" ", ""),
            ("it", "italic"),
            (" ", ""),
            ("under", "underline"),
            (" end", ""),
        ]

    def test_plain_line_is_single_run(self):
        runs = inline_runs("Revenue grew [Insert Chart: Sales] & margins held")
        assert len(runs) == 1
        assert runs[0].text == "Revenue grew [Insert Chart: Sales] & margins held"
        assert runs[0].style == ""


def test_unknown_format():
    with pytest.raises(UnsupportedFormatError):
        parse_markup("<presentation/>", "yaml")


def test_paragraph_text_property():
    assert ParagraphSpec().text == ""
