"""Integration tests for export_epub (Markdown book -> EPUB bytes)"""

import io
import logging
import zipfile
from datetime import date

import pytest
from bs4 import BeautifulSoup

from mdfolio.config import Settings
from mdfolio.core.epub.styles import DEFAULT_STYLESHEET
from mdfolio.core.pipeline import export_epub, sanitize_filename


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _open(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def _soup(archive: zipfile.ZipFile, name: str) -> BeautifulSoup:
    return BeautifulSoup(archive.read(name).decode("utf-8"), "html.parser")


def _spine(archive: zipfile.ZipFile) -> list[str]:
    return [ref["idref"] for ref in _soup(archive, "OEBPS/content.opf").find_all("itemref")]


def test_book_with_frontmatter(book_md):
    """Frontmatter drives metadata, the toc page, dedication and colophon chapters."""
    archive = _open(export_epub(book_md))
    assert _spine(archive) == ["toc-page", "dedication", "chapter-001", "chapter-002", "chapter-003", "colophon"]

    opf = _soup(archive, "OEBPS/content.opf")
    assert opf.find("dc:title").get_text() == "El faro"
    assert opf.find("dc:creator").get_text() == "Ana Pérez"
    assert opf.find("dc:date").get_text() == str(date.today().year)
    assert archive.read("OEBPS/styles.css").decode("utf-8") == DEFAULT_STYLESHEET

    nav = _soup(archive, "OEBPS/nav.xhtml").find("nav", id="toc")
    assert [a["href"] for a in nav.find_all("a")] == [
        "chapter-001.xhtml", "chapter-001.xhtml#la-tormenta", "chapter-002.xhtml", "chapter-003.xhtml",
    ]
    assert [a.get_text() for a in nav.find_all("a")][0] == "Primera parte"


def test_chapter_content_is_rendered(book_md):
    """Chapters carry typographer output; the dedication is boxed and typed."""
    archive = _open(export_epub(book_md))
    chapter = archive.read("OEBPS/chapter-001.xhtml").decode("utf-8")
    assert "«oscura»" in chapter
    assert "–" in chapter
    dedication = _soup(archive, "OEBPS/dedication.xhtml")
    assert dedication.find("div", class_="dedication").em.get_text() == "Lucía"
    assert dedication.body.section["epub:type"] == "dedication"


def test_overrides_beat_frontmatter(book_md):
    """css, cover and toc arguments take precedence over frontmatter."""
    archive = _open(export_epub(book_md, css="p {}", cover=PNG, toc=False))
    assert _spine(archive)[:2] == ["cover-page", "dedication"]
    assert "OEBPS/toc-page.xhtml" not in archive.namelist()
    assert archive.read("OEBPS/styles.css") == b"p {}"
    assert archive.read("OEBPS/cover.png") == PNG


def test_toc_depth_override(book_md):
    """toc_depth=1 lists chapters only on the index page."""
    archive = _open(export_epub(book_md, toc_depth=1))
    page = _soup(archive, "OEBPS/toc-page.xhtml")
    assert [a["href"] for a in page.find("nav").find_all("a")] == [
        "chapter-001.xhtml", "chapter-002.xhtml", "chapter-003.xhtml",
    ]
    assert page.find("h1").get_text() == "Índice"


def test_settings_supply_language_and_toc_title():
    """Settings provide the language and index title when frontmatter is silent."""
    settings = Settings(language="en", toc_title="Contents")
    archive = _open(export_epub("---\ntoc: true\n---\n# One\n\nSaid \"hi\".\n", settings=settings))
    assert _soup(archive, "OEBPS/content.opf").find("dc:language").get_text() == "en"
    assert _soup(archive, "OEBPS/toc-page.xhtml").find("h1").get_text() == "Contents"
    assert "“hi”" in archive.read("OEBPS/chapter-001.xhtml").decode("utf-8")


def test_untitled_section_and_leading_text():
    """Untitled sections get 'Capítulo N'; text before the first H1 joins chapter-001."""
    archive = _open(export_epub("Solo texto.\n"))
    assert _spine(archive) == ["chapter-001"]
    assert _soup(archive, "OEBPS/chapter-001.xhtml").title.get_text() == "Capítulo 1"

    archive = _open(export_epub("Antes del título.\n\n# Uno\n\nTexto.\n"))
    assert "Antes del título." in archive.read("OEBPS/chapter-001.xhtml").decode("utf-8")


def test_empty_body_becomes_single_content_chapter():
    """A book with frontmatter only becomes one 'content' chapter."""
    archive = _open(export_epub("---\ntitle: Vacío\n---\n"))
    assert _spine(archive) == ["content"]


@pytest.mark.parametrize("title,expected", [
    ("El Faro", "el-faro.epub"),
    ("Mi Libro: Uno", "mi-libro--uno.epub"),
    ('a/b\\c?"d"', "a-b-c--d-.epub"),
    ("", "libro.epub"),
])
def test_sanitize_filename(title, expected):
    """Unsafe characters and whitespace become hyphens; an empty title gets a default name."""
    assert sanitize_filename(title) == expected


def test_blank_or_mistyped_frontmatter_does_not_abort_export(caplog):
    """A blank toc key and a non-scalar title are ignored; the book is still packaged."""
    document = "---\ntitle: [Uno, Dos]\ntoc:\ntocDepth: mucho\nauthor: Ana\n---\n# A\n\nx\n"
    with caplog.at_level(logging.WARNING, logger="mdfolio.core.models"):
        archive = _open(export_epub(document))
    opf = _soup(archive, "OEBPS/content.opf")
    assert opf.find("dc:title").get_text() == "Sin título"
    assert opf.find("dc:creator").get_text() == "Ana"
    assert _spine(archive) == ["chapter-001"]
    assert "Ignoring invalid frontmatter" in caplog.text
