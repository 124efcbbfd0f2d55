"""HTML fragment -> XHTML: heading anchors and well-formed serialization via BeautifulSoup.

The fragment is parsed into a node tree once, mutated there, and serialized
back. BeautifulSoup writes HTML void elements self-closed (<br/>, <img .../>),
which is what XHTML content documents need.
"""

import logging

from bs4 import BeautifulSoup

from mdfolio.core.utils.slug import anchor_slug, unique_id


logger = logging.getLogger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# html.parser lowercases names; SVG is case-sensitive once it lives in XML
SVG_TAG_CASE = {
    name.lower(): name for name in (
        'clipPath', 'foreignObject', 'linearGradient', 'radialGradient', 'textPath',
        'feGaussianBlur', 'feOffset', 'feBlend', 'feColorMatrix', 'feMerge', 'feMergeNode',
    )
}
SVG_ATTR_CASE = {
    name.lower(): name for name in (
        'viewBox', 'preserveAspectRatio', 'gradientUnits', 'gradientTransform',
        'patternUnits', 'clipPathUnits', 'textLength', 'stdDeviation', 'markerWidth',
        'markerHeight', 'refX', 'refY', 'pathLength', 'spreadMethod',
    )
}


def parse_fragment(content: str) -> BeautifulSoup:
    return BeautifulSoup(content, 'html.parser')


def _restore_svg_case(soup: BeautifulSoup) -> None:
    for svg in soup.find_all('svg'):
        for tag in [svg, *svg.find_all(True)]:
            tag.name = SVG_TAG_CASE.get(tag.name, tag.name)
            tag.attrs = {SVG_ATTR_CASE.get(k, k): v for k, v in tag.attrs.items()}


def inject_heading_ids(soup: BeautifulSoup, chapter_id: str) -> None:
    """Give every heading without an id a '<chapter_id>-<slug>' id, unique within the fragment."""
    used = {tag['id'] for tag in soup.find_all(id=True)}
    for heading in soup.find_all(HEADING_TAGS):
        if heading.get('id'):
            continue
        slug = anchor_slug(heading.get_text()) or 'section'
        heading['id'] = unique_id(f"{chapter_id}-{slug}", used)


def serialize(soup: BeautifulSoup) -> str:
    _restore_svg_case(soup)
    return soup.decode(formatter='minimal')


def add_heading_ids(content: str, chapter_id: str) -> str:
    """Return content with heading ids injected; the original content if it cannot be processed."""
    if not content:
        return content
    try:
        soup = parse_fragment(content)
        inject_heading_ids(soup, chapter_id)
        return serialize(soup)
    except Exception as e:
        logger.warning("Could not add heading ids to chapter %s: %s", chapter_id, e)
        return content


def to_xhtml(content: str) -> str:
    """Re-serialize an HTML fragment as well-formed XHTML markup."""
    if not content:
        return ''
    return serialize(parse_fragment(content))
