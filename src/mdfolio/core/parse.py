"""Frontmatter extraction/generation and Markdown heading outline"""

import logging
import re
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from mdfolio.core.models import Heading
from mdfolio.core.utils.slug import safe_id, slugify, unique_id
from mdfolio.core.utils.tokens import heading_level, inline_text


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
HEADING_ATTRS_RE = re.compile(r'\s*\{([^}]+)\}\s*$')
_CLASS_RE = re.compile(r'\.([A-Za-z0-9_-]+)')
_ID_RE = re.compile(r'#([A-Za-z0-9_-]+)')


def split_heading_attributes(text: str) -> tuple[str, list[str], Optional[str]]:
    """Split a Pandoc attribute suffix off heading text: 'T {.a .b #c}' -> ('T', ['a', 'b'], 'c')."""
    m = HEADING_ATTRS_RE.search(text)
    if not m:
        return text, [], None
    attrs = m.group(1)
    id_match = _ID_RE.search(attrs)
    return text[:m.start()].rstrip(), _CLASS_RE.findall(attrs), id_match.group(1) if id_match else None


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (metadata, content) with the YAML header removed and content stripped.

    Invalid YAML, or YAML that is not a mapping, leaves the document untouched.
    """
    if not text or not isinstance(text, str):
        return {}, text or ''
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        metadata = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning("Invalid YAML frontmatter, keeping document as-is: %s", e)
        return {}, text
    if not isinstance(metadata, dict):
        logger.warning("Frontmatter is a %s, not a mapping; ignored", type(metadata).__name__)
        return {}, text
    return metadata, text[m.end():].strip()


def generate_frontmatter(metadata: dict[str, Any]) -> str:
    """Render metadata as a '---' delimited YAML block, skipping None and empty lists. '' if nothing is left."""
    if not metadata:
        return ''
    clean = {
        k: v for k, v in metadata.items()
        if v is not None and not (isinstance(v, (list, tuple)) and not v)
    }
    if not clean:
        return ''
    header = yaml.safe_dump(clean, default_flow_style=False, allow_unicode=True, sort_keys=False, width=4096)
    return f"---\n{header}---\n"


def combine_with_frontmatter(metadata: dict[str, Any], content: str) -> str:
    """Prepend a frontmatter block to content when there is any metadata."""
    header = generate_frontmatter(metadata)
    if not header:
        return content
    return f"{header}\n{content}"


def separate_frontmatter(text: str) -> tuple[str, str]:
    """Return (raw YAML text, body) without parsing the YAML."""
    if not text:
        return '', ''
    m = FRONTMATTER_RE.match(text)
    if not m:
        return '', text
    return m.group(1).strip(), text[m.end():].strip()


def extract_headings(markdown: str) -> list[Heading]:
    """Return the heading outline of a Markdown document with 1-based source line numbers.

    Frontmatter and code blocks are skipped. Anchors follow the ids the HTML
    renderer assigns: an explicit {#id} wins, otherwise a deduplicated slug.
    """
    if not markdown:
        return []
    offset = 0
    m = FRONTMATTER_RE.match(markdown)
    if m:
        offset = markdown[:m.end()].count('\n')
        markdown = markdown[m.end():]

    tokens = MarkdownIt('commonmark').parse(markdown)
    headings: list[Heading] = []
    used: set[str] = set()
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None:
            continue
        text, classes, explicit_id = split_heading_attributes(inline_text(tokens[i + 1]).strip())
        if explicit_id:
            anchor = safe_id(explicit_id)
            used.add(anchor)
        else:
            anchor = unique_id(safe_id(slugify(text) or 'section'), used)
        line = tok.map[0] + 1 + offset if tok.map else 0
        headings.append(Heading(level=level, text=text, source_position=line, anchor=anchor, classes=tuple(classes)))
    return headings
