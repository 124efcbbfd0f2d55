"""Word-processor (DOCX) to HTML using python-docx.

The output is deliberately plain: headings from paragraph styles, lists from
list styles, tables, inline emphasis and links. Empty paragraphs are kept as
``<p></p>`` so the empty-paragraph tokenizer can see them.
"""

import html
import io
import logging
import re
import zipfile
from itertools import groupby

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table
from docx.text.hyperlink import Hyperlink
from docx.text.paragraph import Paragraph


logger = logging.getLogger(__name__)

_HEADING_STYLE_RE = re.compile(r'^Heading ([1-6])$', re.IGNORECASE)


def _heading_tag(style_name: str) -> str | None:
    if style_name.lower() == 'title':
        return 'h1'
    m = _HEADING_STYLE_RE.match(style_name)
    return f"h{m.group(1)}" if m else None


def _list_tag(style_name: str) -> str | None:
    lowered = style_name.lower()
    if lowered.startswith('list number'):
        return 'ol'
    if lowered.startswith('list bullet') or lowered == 'list paragraph':
        return 'ul'
    return None


def _style_name(paragraph: Paragraph) -> str:
    style = paragraph.style
    return (style.name if style is not None else '') or ''


def _run_format(run) -> tuple[bool, bool, bool, bool]:
    return (bool(run.bold), bool(run.italic), bool(run.underline), bool(run.font.strike))


def _wrap(text: str, fmt: tuple[bool, bool, bool, bool]) -> str:
    bold, italic, underline, strike = fmt
    out = html.escape(text, quote=False).replace('\n', '<br/>')
    if strike:
        out = f"<s>{out}</s>"
    if underline:
        out = f"<u>{out}</u>"
    if italic:
        out = f"<em>{out}</em>"
    if bold:
        out = f"<strong>{out}</strong>"
    return out


def _runs_html(runs) -> str:
    """Render runs, merging neighbours with identical formatting so emphasis is not fragmented."""
    parts = []
    for fmt, group in groupby((r for r in runs if r.text), key=_run_format):
        parts.append(_wrap(''.join(r.text for r in group), fmt))
    return ''.join(parts)


def _paragraph_html(paragraph: Paragraph) -> str:
    parts = []
    pending = []
    for item in paragraph.iter_inner_content():
        if isinstance(item, Hyperlink):
            parts.append(_runs_html(pending))
            pending = []
            href = html.escape(item.url or '', quote=True)
            parts.append(f'<a href="{href}">{_runs_html(item.runs)}</a>')
        else:
            pending.append(item)
    parts.append(_runs_html(pending))
    return ''.join(parts)


def _table_html(table: Table) -> str:
    rows = []
    for row in table.rows:
        cells = ''.join(f"<td>{html.escape(cell.text.strip(), quote=False)}</td>" for cell in row.cells)
        rows.append(f"<tr>{cells}</tr>")
    return f"<table>{''.join(rows)}</table>"


def _block_html(paragraph: Paragraph) -> tuple[str | None, str]:
    """Return (list tag or None, html) for one paragraph."""
    style = _style_name(paragraph)
    inner = _paragraph_html(paragraph)
    if not paragraph.text.strip():
        return None, "<p></p>"
    if tag := _heading_tag(style):
        return None, f"<{tag}>{inner}</{tag}>"
    if tag := _list_tag(style):
        return tag, f"<li>{inner}</li>"
    return None, f"<p>{inner}</p>"


def open_document(data: bytes):
    """Open DOCX bytes with python-docx; ValueError if they are not a readable document."""
    try:
        return Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ValueError(f"Invalid DOCX document: {e}") from e


def docx_to_html(data: bytes) -> str:
    """Convert DOCX bytes to an HTML fragment."""
    document = open_document(data)
    blocks: list[str] = []
    open_list: str | None = None

    for item in document.iter_inner_content():
        if isinstance(item, Table):
            list_tag, block = None, _table_html(item)
        else:
            list_tag, block = _block_html(item)

        if open_list and list_tag != open_list:
            blocks.append(f"</{open_list}>")
            open_list = None
        if list_tag and not open_list:
            blocks.append(f"<{list_tag}>")
            open_list = list_tag
        blocks.append(block)

    if open_list:
        blocks.append(f"</{open_list}>")
    logger.debug("DOCX read: %d block(s)", len(blocks))
    return '\n'.join(blocks)
