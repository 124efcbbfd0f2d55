"""Unit tests for core/docx/reader.py"""

import io

import pytest
from bs4 import BeautifulSoup
from docx import Document

from mdfolio.core.docx.reader import docx_to_html


def _save(doc) -> bytes:
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def test_styles_map_to_blocks(make_docx):
    """Heading, title, list and empty paragraphs map to their HTML blocks."""
    data = make_docx([
        ("h0", "Título"), ("h2", "Autora"), ("p", "Hola"), ("empty", ""),
        ("bullet", "a"), ("bullet", "b"), ("number", "uno"),
    ])
    soup = BeautifulSoup(docx_to_html(data), "html.parser")
    blocks = [tag.name for tag in soup.find_all(recursive=False)]
    assert blocks == ["h1", "h2", "p", "p", "ul", "ol"]
    assert [li.get_text() for li in soup.ul.find_all("li")] == ["a", "b"]
    assert soup.find_all("p")[1].get_text() == ""


def test_runs_with_same_format_are_merged():
    """Adjacent runs with the same formatting share one inline tag."""
    doc = Document()
    p = doc.add_paragraph("Una ")
    for text in ("pala", "bra"):
        p.add_run(text).bold = True
    p.add_run(" y ")
    p.add_run("cursiva").italic = True
    html = docx_to_html(_save(doc))
    assert html == "<p>Una <strong>palabra</strong> y <em>cursiva</em></p>"


def test_text_is_escaped():
    """Run text is HTML-escaped."""
    doc = Document()
    doc.add_paragraph("a < b & c")
    assert docx_to_html(_save(doc)) == "<p>a &lt; b &amp; c</p>"


def test_tables():
    """Tables become table rows and cells."""
    doc = Document()
    table = doc.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "x"
    table.cell(0, 1).text = "y"
    assert docx_to_html(_save(doc)) == "<table><tr><td>x</td><td>y</td></tr></table>"


@pytest.mark.parametrize("data", [b"not a docx", b""])
def test_invalid_input_raises_value_error(data):
    """Unreadable bytes raise ValueError."""
    with pytest.raises(ValueError, match="Invalid DOCX document"):
        docx_to_html(data)
