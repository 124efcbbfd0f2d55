"""Pipeline step functions: DOCX -> Markdown conversion and Markdown -> EPUB export"""

import logging
import re
from datetime import date
from typing import Optional, Union

from bs4 import BeautifulSoup
from markdownify import markdownify

from mdfolio.config import Settings
from mdfolio.core.docx.classify import (
    adjust_heading_levels,
    analyze_structure,
    collect_headings,
    extract_metadata,
    remove_metadata_headings,
)
from mdfolio.core.docx.heuristics import detect_body_headings, extract_metadata_from_paragraphs
from mdfolio.core.docx.normalize import mark_empty_paragraphs, normalize_markdown
from mdfolio.core.docx.reader import docx_to_html
from mdfolio.core.epub.book import EpubBook
from mdfolio.core.epub.styles import DEFAULT_STYLESHEET
from mdfolio.core.models import BookFrontmatter, DocxMetadata, DocxOptions, DocxResult
from mdfolio.core.parse import parse_frontmatter, separate_frontmatter
from mdfolio.core.render import extract_sections, markdown_to_html, markdown_to_html_inline


logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')


def docx_to_markdown(data: bytes, options: Optional[DocxOptions] = None) -> DocxResult:
    """Convert DOCX bytes to Markdown, returning title/author apart from the body.

    Steps: read -> mark empty paragraphs -> classify headings -> extract
    metadata (headings, else first paragraphs) -> detect in-body headings ->
    promote heading levels -> HTML to Markdown -> normalize separators and
    whitespace. Ambiguous structure is reported in warnings, never raised.
    Raises ValueError if data is not a DOCX document.
    """
    options = options or DocxOptions()
    soup = BeautifulSoup(docx_to_html(data), 'html.parser')
    mark_empty_paragraphs(soup)

    pairs = collect_headings(soup)
    structure = analyze_structure([heading for heading, _ in pairs])
    warnings = list(structure.warnings)

    metadata: dict[str, str] = {}
    if options.extract_metadata:
        if structure.metadata_headings:
            metadata = extract_metadata(structure)
            remove_metadata_headings(pairs, structure)
        else:
            metadata = extract_metadata_from_paragraphs(soup)
            if metadata:
                warnings.append("Title/author were detected from the first paragraphs (no H1/H2 styles).")

    warnings.extend(detect_body_headings(soup, has_existing_headings=len(structure.content_headings) > 0))

    if options.adjust_headings and structure.levels_to_adjust > 0:
        adjust_heading_levels(soup, structure.levels_to_adjust)

    markdown = markdownify(str(soup), heading_style="ATX", bullets="-")
    content = normalize_markdown(
        markdown,
        threshold=options.scene_break_threshold,
        scene_separators=options.scene_separators,
        clean=options.clean_whitespace,
    )
    logger.debug("DOCX converted: %d heading(s), %d warning(s)", len(pairs), len(warnings))
    return DocxResult(content=content, metadata=DocxMetadata(**metadata), warnings=warnings)


def sanitize_filename(title: str, extension: str = ".epub") -> str:
    """File name for a book title: unsafe characters and whitespace become '-', lowercased."""
    stem = _UNSAFE_FILENAME_RE.sub('-', (title or '').strip())
    stem = re.sub(r'\s+', '-', stem).lower() or 'libro'
    return f"{stem}{extension}"


def _boxed(markdown: str, css_class: str, lang: str) -> str:
    return f'<div class="{css_class}">{markdown_to_html_inline(markdown, lang)}</div>'


def _leading_content(html: str) -> str:
    """HTML that precedes the first top-level <section> (text written before the first H1)."""
    lead = []
    for node in BeautifulSoup(html, 'html.parser').contents:
        if getattr(node, 'name', None) == 'section':
            break
        lead.append(str(node))
    return ''.join(lead).strip()


def export_epub(
    document: str,
    css: Optional[str] = None,
    cover: Optional[Union[str, bytes]] = None,
    settings: Optional[Settings] = None,
    toc: Optional[bool] = None,
    toc_depth: Optional[int] = None,
    ) -> bytes:
    """Package a Markdown book (frontmatter + body) as EPUB bytes.

    Each top-level section of the rendered body becomes a chapter. Frontmatter
    dedication and colophon become hidden chapters before and after them.
    toc/toc_depth override the frontmatter keys of the same name.
    """
    settings = settings or Settings()
    raw, _ = parse_frontmatter(document)
    fm = BookFrontmatter.from_metadata(raw)
    _, body = separate_frontmatter(document)
    lang = fm.lang or settings.language

    book = EpubBook()
    book.set_metadata({
        "title":     fm.title or "Sin título",
        "author":    fm.author or "",
        "publisher": fm.publisher or "",
        "language":  lang,
        "rights":    fm.copyright or "",
        "date":      fm.date or str(date.today().year),
    })
    if cover:
        book.set_cover(cover)
    book.set_stylesheet(css or DEFAULT_STYLESHEET)

    show_toc = bool(fm.toc) if toc is None else toc
    if show_toc:
        book.enable_toc_page(title=settings.toc_title, depth=toc_depth or fm.toc_depth or settings.toc_depth)

    html = markdown_to_html(body, lang)
    sections = extract_sections(html)

    if fm.dedication and fm.dedication.strip():
        book.add_chapter({
            "id": "dedication", "title": "Dedicatoria", "role": "dedication", "show_in_toc": False,
            "content": _boxed(fm.dedication, "dedication", lang),
        })

    if sections:
        lead = _leading_content(html)
        for i, section in enumerate(sections, start=1):
            content = section.html
            if i == 1 and lead:
                content = f"{lead}\n{content}"
            book.add_chapter({
                "id": f"chapter-{i:03d}",
                "title": section.title or f"Capítulo {i}",
                "content": content,
            })
    else:
        book.add_chapter({"id": "content", "title": fm.title or "Contenido", "content": html or "<p></p>"})

    if fm.colophon and fm.colophon.strip():
        book.add_chapter({
            "id": "colophon", "title": "Colofón", "role": "colophon", "show_in_toc": False,
            "content": _boxed(fm.colophon, "colophon", lang),
        })

    logger.info("Exporting '%s' with %d chapter(s)", fm.title or "Sin título", len(book.get_chapters()))
    return book.generate()
