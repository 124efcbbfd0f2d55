"""Paragraph heuristics for documents that do not use heading styles.

Both passes are best effort. A short first sentence without a final period
will be taken for a title; that false positive is accepted.
"""

import logging

from bs4 import BeautifulSoup, Tag

from mdfolio.core.docx.normalize import is_token_text


logger = logging.getLogger(__name__)

MAX_CANDIDATES = 5
MAX_TITLE_LENGTH = 150
MAX_AUTHOR_LENGTH = 100
MAX_HEADING_LENGTH = 150
BOLD_RATIO = 0.9
PREVIEW_LENGTH = 50


def _text(p: Tag) -> str:
    return p.get_text().strip()


def _looks_like_label(text: str, limit: int) -> bool:
    return len(text) < limit and not text.endswith('.')


def extract_metadata_from_paragraphs(soup: BeautifulSoup) -> dict[str, str]:
    """Take title (and author) from the first short, unpunctuated paragraphs and remove them.

    Only the first MAX_CANDIDATES non-empty, non-token paragraphs are considered.
    """
    candidates = []
    for p in soup.find_all('p'):
        text = _text(p)
        if text and not is_token_text(text):
            candidates.append((p, text))
        if len(candidates) >= MAX_CANDIDATES:
            break

    metadata: dict[str, str] = {}
    if not candidates:
        return metadata

    first, title = candidates[0]
    if not _looks_like_label(title, MAX_TITLE_LENGTH):
        return metadata
    metadata['title'] = title
    first.decompose()

    if len(candidates) > 1:
        second, author = candidates[1]
        if _looks_like_label(author, MAX_AUTHOR_LENGTH):
            metadata['author'] = author
            second.decompose()
    return metadata


def _is_heading_candidate(paragraphs: list[Tag], texts: list[str], i: int) -> bool:
    text = texts[i]
    if not text or is_token_text(text) or len(text) >= MAX_HEADING_LENGTH:
        return False
    if not text[-1].isalnum():
        return False
    # a lowercase ending followed by a lowercase start is a sentence broken across paragraphs
    if text[-1].islower() and i + 1 < len(paragraphs):
        following = texts[i + 1]
        if following and not is_token_text(following) and following[0].islower():
            return False
    return text[0].isupper() or text[0].isdigit()


def _is_bold(p: Tag, text: str) -> bool:
    bold = [b for b in p.find_all(['strong', 'b']) if not b.find_parent(['strong', 'b'])]
    if not bold:
        return False
    bold_length = sum(len(b.get_text().strip()) for b in bold)
    return bold_length >= len(text) * BOLD_RATIO


def detect_body_headings(soup: BeautifulSoup, has_existing_headings: bool) -> list[str]:
    """Promote heading-like paragraphs to headings in place; returns one warning per promotion.

    If any candidate is bold, only bold candidates are promoted. Promoted
    paragraphs become h1 when the document has no other headings, else h6.
    """
    paragraphs = soup.find_all('p')
    texts = [_text(p) for p in paragraphs]
    candidates = [i for i in range(len(paragraphs)) if _is_heading_candidate(paragraphs, texts, i)]
    if not candidates:
        return []

    bold_only = any(_is_bold(paragraphs[i], texts[i]) for i in candidates)
    target = 'h6' if has_existing_headings else 'h1'
    warnings = []
    for i in candidates:
        p, text = paragraphs[i], texts[i]
        if bold_only and not _is_bold(p, text):
            continue
        p.name = target
        for b in p.find_all(['strong', 'b']):
            b.unwrap()
        preview = text[:PREVIEW_LENGTH]
        warnings.append(f'Heuristic: paragraph converted to {target.upper()}: "{preview}..."')
    logger.debug("Promoted %d paragraph(s) to %s", len(warnings), target)
    return warnings
