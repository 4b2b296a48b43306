"""Tests for content import and clipboard format sniffing."""

import pytest

from content_slides.errors import EmptyInputError, UnsupportedFormatError
from content_slides.importer import ImportSession, sniff_format
from content_slides.models import ContentFormat


@pytest.mark.parametrize("text,expected", [
    ("<presentation><slide/></presentation>", ContentFormat.XML),
    ('[{"title": "A"}]', ContentFormat.JSON),
    ("42", ContentFormat.JSON),            # any JSON value counts
    ('"just a string"', ContentFormat.JSON),
    ("# Title\nSome line", ContentFormat.MARKDOWN),
    ("<p>unclosed", ContentFormat.MARKDOWN),
    ("{not json", ContentFormat.MARKDOWN),
])
def test_sniff_format(text, expected):
    assert sniff_format(text) is expected


def test_import_text_trims_and_detects_placeholders():
    session = ImportSession()
    content = session.import_text("  \n# Slide\n[Insert Image: Logo]\n[Insert Image: Logo]\n  ")

    assert content.format is ContentFormat.MARKDOWN
    assert content.text.startswith("# Slide")
    assert session.placeholders == ["[Insert Image: Logo]"]
    assert session.unresolved == ["[Insert Image: Logo]"]


@pytest.mark.parametrize("text", ["", "   \n\t ", None])
def test_import_text_rejects_empty(text):
    with pytest.raises(EmptyInputError):
        ImportSession().import_text(text)


def test_new_import_clears_mapping(tmp_path):
    session = ImportSession(base_dir=tmp_path)
    session.import_text("# A\n[Insert Image: Logo]")
    session.resolve_placeholders({"[Insert Image: Logo]": "logo.png"})
    assert session.mapping

    session.import_text("# B\n[Insert Chart: Sales]")
    assert session.mapping == {}
    assert session.placeholders == ["[Insert Chart: Sales]"]


def test_import_file_uses_extension(tmp_path):
    path = tmp_path / "deck.json"
    path.write_text('[{"title": "T", "elements": []}]', encoding="utf-8")

    session = ImportSession()
    content = session.import_file(path)
    assert content.format is ContentFormat.JSON
    assert session.base_dir == tmp_path.resolve()


def test_import_file_explicit_format_wins(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("# Title\nline", encoding="utf-8")
    assert ImportSession().import_file(path, "md").format is ContentFormat.MARKDOWN


def test_import_file_errors(tmp_path):
    unknown = tmp_path / "notes.txt"
    unknown.write_text("# Title", encoding="utf-8")
    with pytest.raises(UnsupportedFormatError):
        ImportSession().import_file(unknown)
    with pytest.raises(UnsupportedFormatError):
        ImportSession().import_file(unknown, "yaml")

    empty = tmp_path / "empty.xml"
    empty.write_text("  \n", encoding="utf-8")
    with pytest.raises(EmptyInputError):
        ImportSession().import_file(empty)


def test_resolve_placeholders_relative_to_imported_file(tmp_path):
    path = tmp_path / "deck.md"
    path.write_text("# Title\n[Insert Image: Logo]", encoding="utf-8")

    session = ImportSession()
    session.import_file(path)
    mapping = session.resolve_placeholders({"[Insert Image: Logo]": "assets/logo.png"})
    assert mapping == {"[Insert Image: Logo]": str((tmp_path / "assets" / "logo.png").resolve())}
    assert session.unresolved == []
