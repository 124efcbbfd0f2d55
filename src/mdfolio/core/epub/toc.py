"""Table of contents: flat entry extraction and nested <ol> rendering"""

import html
import logging

from mdfolio.core.epub.models import Chapter, TocEntry
from mdfolio.core.epub.xhtml import HEADING_TAGS, inject_heading_ids, parse_fragment


logger = logging.getLogger(__name__)


def collect_toc_entries(chapters: list[Chapter], depth: int = 1) -> list[TocEntry]:
    """Flatten the visible chapters into TOC entries.

    Each chapter is a level-1 entry; with depth > 1 its h2 (and h3) headings
    follow at their own level, linked through the ids that chapter documents
    receive. A chapter whose content cannot be parsed contributes only its
    level-1 entry.
    """
    entries = []
    for chapter in chapters:
        if not chapter.show_in_toc:
            continue
        href = f"{chapter.id}.xhtml"
        entries.append(TocEntry(level=1, title=chapter.title, href=href))
        if depth <= 1:
            continue
        try:
            soup = parse_fragment(chapter.content)
            inject_heading_ids(soup, chapter.id)
            for heading in soup.find_all(HEADING_TAGS[1:depth]):
                entries.append(TocEntry(
                    level=int(heading.name[1]),
                    title=heading.get_text().strip(),
                    href=f"{href}#{heading['id']}",
                ))
        except Exception as e:
            logger.warning("Could not extract headings from chapter %s: %s", chapter.id, e)
    return entries


def _render_level(entries: list[TocEntry], start: int, level: int, indent: str) -> tuple[str, int]:
    items: list[list[str]] = []
    i = start
    while i < len(entries):
        entry = entries[i]
        if entry.level < level:
            break
        if entry.level > level:
            nested, i = _render_level(entries, i, entry.level, indent + '    ')
            sublist = f'\n{indent}    <ol class="toc-list">{nested}\n{indent}    </ol>\n{indent}'
            if items:
                items[-1].append(sublist)
            else:
                items.append([f'\n{indent}<li>', sublist])
            continue
        css = f' class="toc-level-{entry.level}"' if entry.level > 1 else ''
        items.append([
            f'\n{indent}<li{css}><a href="{html.escape(entry.href)}">{html.escape(entry.title)}</a>'
        ])
        i += 1
    return ''.join(''.join(parts) + '</li>' for parts in items), i


def render_toc_list(entries: list[TocEntry], indent: str = '            ') -> str:
    """Render entries as <li> items; deeper levels nest an <ol class="toc-list"> inside the previous item."""
    rendered, _ = _render_level(entries, 0, 1, indent)
    return rendered
