"""Unit tests for core/models.py"""

import datetime
import logging

from mdfolio.config import Settings
from mdfolio.core.models import BookFrontmatter, DocumentStructure, DocxOptions, Heading


def test_book_frontmatter_coerces_scalars_and_keeps_extras():
    """YAML dates and numbers become strings; unknown keys are kept as extras."""
    fm = BookFrontmatter.model_validate({
        "title": "T", "date": datetime.date(2024, 5, 1), "isbn": 9780000000000,
        "tocDepth": 2, "series": "Saga",
    })
    assert fm.date == "2024-05-01"
    assert fm.isbn == "9780000000000"
    assert fm.toc_depth == 2
    assert fm.toc is None
    assert fm.model_extra == {"series": "Saga"}


def test_docx_options_from_settings():
    """DocxOptions mirrors the DOCX switches of Settings."""
    options = DocxOptions.from_settings(Settings(scene_separators=False, scene_break_threshold=4))
    assert options.scene_separators is False
    assert options.scene_break_threshold == 4
    assert options.extract_metadata is True


def test_document_structure_title_and_author():
    """title and author are read from the metadata headings."""
    title, author = Heading(1, "T", 0), Heading(2, "A", 1)
    structure = DocumentStructure(headings=[title, author], metadata_headings=[title, author])
    assert structure.title is title
    assert structure.author is author
    assert DocumentStructure().title is None


def test_book_frontmatter_drops_invalid_known_keys(caplog):
    """Blank or mistyped known keys are dropped with a warning; valid keys and extras survive."""
    raw = {"title": ["a", "b"], "toc": None, "tocDepth": "deep", "date": {"y": 1}, "author": "Ana", "series": "Saga"}
    with caplog.at_level(logging.WARNING, logger="mdfolio.core.models"):
        fm = BookFrontmatter.from_metadata(raw)
    assert (fm.title, fm.toc, fm.toc_depth, fm.date) == (None, None, None, None)
    assert fm.author == "Ana"
    assert fm.model_extra == {"series": "Saga"}
    assert "tocDepth" in caplog.text
    assert raw["title"] == ["a", "b"]


def test_book_frontmatter_accepts_field_names_and_aliases():
    """tocDepth and toc_depth both reach the same field."""
    assert BookFrontmatter.from_metadata({"tocDepth": 2}).toc_depth == 2
    assert BookFrontmatter.from_metadata({"toc_depth": 3}).toc_depth == 3
    assert BookFrontmatter.from_metadata({"toc": "yes"}).toc is True
