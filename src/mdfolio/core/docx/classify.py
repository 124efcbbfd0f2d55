"""Heading classification: title/author metadata versus structural headings.

Word documents often open with the book title as Heading 1 and the author as
Heading 2, then use Heading 3 for chapters. The classifier recognizes that
layout, reports which leading headings are metadata and how many levels the
remaining headings must be promoted so content starts at level 1. Every
inference is recorded as a warning so the caller can surface it.
"""

import logging

from bs4 import BeautifulSoup, Tag

from mdfolio.core.models import DocumentStructure, Heading


logger = logging.getLogger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']


def analyze_structure(headings: list[Heading]) -> DocumentStructure:
    """Classify an ordered heading list into metadata and content headings."""
    if not headings:
        return DocumentStructure()

    warnings: list[str] = []
    levels_to_adjust = 0
    title_index = 0 if headings[0].level == 1 else -1
    author_index = -1

    h2_indexes = [i for i, h in enumerate(headings) if h.level == 2]
    h2_count = len(h2_indexes)

    if h2_count == 1:
        h2_index = h2_indexes[0]
        # the author sits right after the title, or takes its place when there is none
        if h2_index == title_index + 1:
            author_index = h2_index
            warnings.append("A single H2 was found at the start; it was read as the author.")
            first_content = author_index + 1
            if first_content < len(headings):
                levels_to_adjust = max(0, headings[first_content].level - 1)
                if levels_to_adjust > 0:
                    warnings.append(
                        f"Deep heading structure detected; headings were promoted {levels_to_adjust} "
                        f"level(s) (e.g. H{levels_to_adjust + 1} -> H1)."
                    )
            else:
                warnings.append("The document seems to contain only a title and author.")
        elif title_index != -1:
            warnings.append("A title (H1) was found but no clear author candidate.")
        else:
            warnings.append("A single H2 was found away from the start; it was kept as a section title.")
    elif h2_count > 1:
        warnings.append(f"{h2_count} H2 headings were found; they were read as chapters, not as the author.")
        if title_index != -1:
            levels_to_adjust = 1
            warnings.append("Chapters were promoted from H2 to H1 to become the top level of the document.")
    else:
        warnings.append("No H2 headings were found; flat structure.")

    metadata = headings[:max(title_index, author_index) + 1]
    structure = DocumentStructure(
        headings=list(headings),
        metadata_headings=metadata,
        content_headings=list(headings[len(metadata):]),
        levels_to_adjust=levels_to_adjust,
        warnings=warnings,
    )
    logger.debug(
        "Classified %d heading(s): %d metadata, adjust by %d",
        len(headings), len(metadata), levels_to_adjust,
    )
    return structure


def extract_metadata(structure: DocumentStructure) -> dict[str, str]:
    """Return {'title': ..., 'author': ...} for whichever metadata headings were found."""
    metadata = {}
    if structure.title:
        metadata['title'] = structure.title.text
    if structure.author:
        metadata['author'] = structure.author.text
    return metadata


def adjust_levels(headings: list[Heading], levels: int) -> list[Heading]:
    """Return headings promoted by levels, clamped to 1..6."""
    return [
        Heading(
            level=max(1, min(6, h.level - levels)),
            text=h.text,
            source_position=h.source_position,
            anchor=h.anchor,
            classes=h.classes,
        )
        for h in headings
    ]


def collect_headings(soup: BeautifulSoup) -> list[tuple[Heading, Tag]]:
    """Pair each heading element with its Heading value, in document order.

    source_position is the element's index among the top-level blocks.
    """
    blocks = [node for node in soup.contents if isinstance(node, Tag)]
    positions = {id(node): i for i, node in enumerate(blocks)}
    pairs = []
    for tag in soup.find_all(HEADING_TAGS):
        top = tag
        while top.parent is not None and top.parent is not soup:
            top = top.parent
        heading = Heading(
            level=int(tag.name[1]),
            text=tag.get_text().strip(),
            source_position=positions.get(id(top), -1),
        )
        pairs.append((heading, tag))
    return pairs


def remove_metadata_headings(pairs: list[tuple[Heading, Tag]], structure: DocumentStructure) -> None:
    """Detach the metadata heading elements from their tree."""
    for _, tag in pairs[:len(structure.metadata_headings)]:
        tag.decompose()


def adjust_heading_levels(soup: BeautifulSoup, levels: int) -> None:
    """Rename every heading element h(n) to h(n - levels), clamped to 1..6."""
    if levels <= 0:
        return
    for tag in soup.find_all(HEADING_TAGS):
        tag.name = f"h{max(1, min(6, int(tag.name[1]) - levels))}"
