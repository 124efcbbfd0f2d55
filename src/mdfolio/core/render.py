"""Markdown to HTML: markdown-it rendering, heading attributes, ids and per-H1 sections"""

import html
import logging

from bs4 import BeautifulSoup, Tag
from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin

from mdfolio.core.models import Section
from mdfolio.core.parse import HEADING_ATTRS_RE, separate_frontmatter, split_heading_attributes
from mdfolio.core.utils.slug import safe_id, slugify, unique_id


logger = logging.getLogger(__name__)

ANGULAR_QUOTE_LANGUAGES = {'es', 'ca', 'gl', 'eu', 'fr', 'it', 'pt'}
HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']


def _heading_attributes(state) -> None:
    """Core rule: move a trailing {.class #id} from heading text onto the heading_open token."""
    tokens = state.tokens
    for i, tok in enumerate(tokens):
        if tok.type != 'heading_open' or i + 1 >= len(tokens):
            continue
        inline = tokens[i + 1]
        children = inline.children or []
        if not children or children[-1].type != 'text':
            continue
        last = children[-1]
        if not HEADING_ATTRS_RE.search(last.content):
            continue
        text, classes, heading_id = split_heading_attributes(last.content)
        last.content = text
        inline.content = HEADING_ATTRS_RE.sub('', inline.content)
        if classes:
            tok.attrSet('class', ' '.join(classes))
        if heading_id:
            tok.attrSet('id', safe_id(heading_id))


def make_parser() -> MarkdownIt:
    """Build the MarkdownIt instance: tables, strikethrough, footnotes, typographer."""
    md = MarkdownIt('commonmark', options_update={'typographer': True})
    md.enable(['table', 'strikethrough', 'replacements', 'smartquotes'])
    md.use(footnote_plugin)
    md.core.ruler.push('heading_attributes', _heading_attributes)
    return md


_parser = make_parser()


def convert_to_angular_quotes(text: str, lang: str | None) -> str:
    """Replace curly double quotes with guillemets for languages that use them."""
    if not lang or lang.split('-')[0].lower() not in ANGULAR_QUOTE_LANGUAGES:
        return text
    return text.replace('“', '«').replace('”', '»')


def _assign_heading_ids(soup: BeautifulSoup) -> None:
    used = {tag['id'] for tag in soup.find_all(id=True)}
    for heading in soup.find_all(HEADING_TAGS):
        if heading.get('id'):
            heading['id'] = safe_id(heading['id'])
            continue
        heading['id'] = unique_id(safe_id(slugify(heading.get_text()) or 'section'), used)


def _sectionize(soup: BeautifulSoup) -> bool:
    """Wrap each top-level h1 and its following siblings in a <section>. False if there is no h1."""
    nodes = list(soup.contents)
    if not any(isinstance(n, Tag) and n.name == 'h1' for n in nodes):
        return False
    section = None
    for node in nodes:
        if isinstance(node, Tag) and node.name == 'h1':
            section = soup.new_tag('section')
            node.insert_before(section)
        if section is not None:
            section.append(node.extract())
    return True


def _propagate_classes(soup: BeautifulSoup) -> None:
    """Copy heading classes onto the section that encloses the heading."""
    for heading in soup.find_all(HEADING_TAGS):
        classes = heading.get('class')
        section = heading.find_parent('section')
        if not classes or section is None:
            continue
        merged = list(section.get('class') or [])
        merged.extend(c for c in classes if c not in merged)
        section['class'] = merged


def _render(markdown: str, lang: str | None, sections: bool) -> str:
    rendered = _parser.render(markdown)
    soup = BeautifulSoup(rendered, 'html.parser')
    _assign_heading_ids(soup)
    if sections:
        if _sectionize(soup):
            _propagate_classes(soup)
        elif soup.get_text().strip() or soup.find(True):
            wrapper = soup.new_tag('section')
            for node in list(soup.contents):
                wrapper.append(node.extract())
            soup.append(wrapper)
    return convert_to_angular_quotes(str(soup), lang)


def markdown_to_html(markdown: str, lang: str | None = None) -> str:
    """Render a Markdown body (no frontmatter) to HTML with one <section> per H1."""
    if not markdown:
        return ''
    return _render(markdown, lang, sections=True)


def markdown_to_html_inline(markdown: str, lang: str | None = None) -> str:
    """Render short Markdown (dedication, colophon) without section wrapping."""
    if not markdown:
        return ''
    return _render(markdown, lang, sections=False)


def convert_document(content: str, lang: str | None = None) -> tuple[str, str]:
    """Split frontmatter off a full document and render the body. Returns (frontmatter_yaml, html)."""
    frontmatter, body = separate_frontmatter(content)
    return frontmatter, markdown_to_html(body, lang)


def generate_table_of_contents(rendered: str, depth: int = 1) -> str:
    """Flat <ul class="toc-list"> of the headings up to depth that carry an id; '' if none."""
    if not rendered:
        return ''
    soup = BeautifulSoup(rendered, 'html.parser')
    headings = soup.find_all(HEADING_TAGS[:max(1, min(6, depth))])
    items = []
    for heading in headings:
        text, anchor = heading.get_text(), heading.get('id')
        if text and anchor:
            items.append(
                f'  <li class="toc-level-{heading.name[1]}"><a href="#{html.escape(anchor)}">'
                f'<span class="toc-text">{html.escape(text)}</span></a></li>\n'
            )
    if not items:
        return ''
    return '<ul class="toc-list">\n' + ''.join(items) + '</ul>'


def extract_sections(rendered: str) -> list[Section]:
    """Return each top-level <section> as (title of its first h1, inner HTML)."""
    if not rendered:
        return []
    soup = BeautifulSoup(rendered, 'html.parser')
    sections = []
    for section in soup.find_all('section', recursive=False):
        h1 = section.find('h1')
        sections.append(Section(
            title=h1.get_text().strip() if h1 else '',
            html=section.decode_contents(),
        ))
    return sections
