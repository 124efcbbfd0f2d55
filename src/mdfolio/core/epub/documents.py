"""Package, navigation and content documents of an EPUB 3 archive"""

import re
from datetime import date, datetime, timezone
from html import escape
from typing import Optional

from mdfolio.core.epub.models import DEFAULT_ROLE, BookSpec, Chapter, CoverInfo
from mdfolio.core.epub.toc import collect_toc_entries, render_toc_list
from mdfolio.core.epub.xhtml import add_heading_ids, to_xhtml


UNTITLED = "Sin título"
UNKNOWN_AUTHOR = "Autor desconocido"
BODYMATTER_LABEL = "Inicio del contenido"
NAV_TITLE = "Índice"
STYLESHEET_HREF = "styles.css"

_SVG_TAG_RE = re.compile(r'<svg[\s/>]', re.IGNORECASE)

EPUB_TYPES = {
    'cover':           'cover',
    'titlepage':       'titlepage',
    'copyright':       'copyright-page',
    'dedication':      'dedication',
    'epigraph':        'epigraph',
    'foreword':        'foreword',
    'preface':         'preface',
    'introduction':    'introduction',
    'prologue':        'prologue',
    'chapter':         'chapter',
    'part':            'part',
    'epilogue':        'epilogue',
    'afterword':       'afterword',
    'appendix':        'appendix',
    'glossary':        'glossary',
    'bibliography':    'bibliography',
    'index':           'index',
    'colophon':        'colophon',
    'acknowledgments': 'acknowledgments',
}

XHTML_OPEN = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE html>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops" xml:lang="{lang}">\n'
)


def role_to_epub_type(role: str) -> str:
    """Map a chapter role to its epub:type; '' for roles outside the vocabulary."""
    return EPUB_TYPES.get(role, '')


def _lang(spec: BookSpec) -> str:
    return escape(spec.metadata.language or 'es')


def _css_link(spec: BookSpec) -> str:
    return f'<link rel="stylesheet" type="text/css" href="{STYLESHEET_HREF}"/>' if spec.stylesheet else ''


def _body_class(spec: BookSpec) -> str:
    return f' class="{escape(spec.body_class)}"' if spec.body_class else ''


def container_xml() -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">\n'
        '    <rootfiles>\n'
        '        <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>\n'
        '    </rootfiles>\n'
        '</container>\n'
    )


def package_document(spec: BookSpec, cover: Optional[CoverInfo], modified: Optional[datetime] = None) -> str:
    """content.opf: Dublin Core metadata, manifest and spine (cover page, toc page, chapters)."""
    meta = spec.metadata
    identifier = meta.identifier or f"urn:uuid:{spec.uuid}"
    issued = meta.date or date.today().isoformat()
    modified = (modified or datetime.now(timezone.utc)).strftime('%Y-%m-%dT%H:%M:%SZ')

    optional = ''.join(
        f'\n        <dc:{name}>{escape(value)}</dc:{name}>'
        for name, value in (
            ('publisher', meta.publisher), ('description', meta.description),
            ('subject', meta.subject), ('rights', meta.rights),
        )
        if value
    )

    manifest = ['<item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>']
    spine = []
    if spec.stylesheet:
        manifest.append(f'<item id="css" href="{STYLESHEET_HREF}" media-type="text/css"/>')
    if cover:
        manifest.append(
            f'<item id="cover-image" href="cover.{cover.extension}" media-type="{cover.mime}" properties="cover-image"/>'
        )
        manifest.append('<item id="cover-page" href="cover.xhtml" media-type="application/xhtml+xml"/>')
        spine.append('<itemref idref="cover-page"/>')
    if spec.toc_page.enabled:
        manifest.append('<item id="toc-page" href="toc-page.xhtml" media-type="application/xhtml+xml"/>')
        spine.append('<itemref idref="toc-page"/>')
    for chapter in spec.chapters:
        props = ' properties="svg"' if _SVG_TAG_RE.search(chapter.content) else ''
        manifest.append(
            f'<item id="{chapter.id}" href="{chapter.id}.xhtml" media-type="application/xhtml+xml"{props}/>'
        )
        spine.append(f'<itemref idref="{chapter.id}"/>')

    items = ''.join(f'\n        {m}' for m in manifest)
    refs = ''.join(f'\n        {s}' for s in spine)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="book-id" xml:lang="{_lang(spec)}">
    <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
        <dc:identifier id="book-id">{escape(identifier)}</dc:identifier>
        <dc:title>{escape(meta.title or UNTITLED)}</dc:title>
        <dc:language>{_lang(spec)}</dc:language>
        <dc:creator>{escape(meta.author or UNKNOWN_AUTHOR)}</dc:creator>
        <dc:date>{escape(issued)}</dc:date>
        <meta property="dcterms:modified">{modified}</meta>{optional}
    </metadata>
    <manifest>{items}
    </manifest>
    <spine>{refs}
    </spine>
</package>
"""


def _landmarks(chapters: tuple[Chapter, ...]) -> str:
    lines = []
    first = next((ch for ch in chapters if ch.role == DEFAULT_ROLE), None)
    if first:
        lines.append(f'<li><a epub:type="bodymatter" href="{first.id}.xhtml">{BODYMATTER_LABEL}</a></li>')
    for ch in chapters:
        if ch.role == DEFAULT_ROLE:
            continue
        epub_type = role_to_epub_type(ch.role)
        attr = f' epub:type="{epub_type}"' if epub_type else ''
        lines.append(f'<li><a{attr} href="{ch.id}.xhtml">{escape(ch.title)}</a></li>')
    return ''.join(f'\n            {line}' for line in lines)


def nav_document(spec: BookSpec) -> str:
    """nav.xhtml: the toc nav (as deep as the toc page, else chapters only) and hidden landmarks."""
    depth = spec.toc_page.depth if spec.toc_page.enabled else 1
    entries = collect_toc_entries(list(spec.chapters), depth)
    return XHTML_OPEN.format(lang=_lang(spec)) + f"""<head>
    <meta charset="UTF-8"/>
    <title>Tabla de contenidos</title>
</head>
<body>
    <nav epub:type="toc" id="toc">
        <h1>{NAV_TITLE}</h1>
        <ol>{render_toc_list(entries)}
        </ol>
    </nav>
    <nav epub:type="landmarks" hidden="">
        <h1>Landmarks</h1>
        <ol>{_landmarks(spec.chapters)}
        </ol>
    </nav>
</body>
</html>
"""


def cover_page(spec: BookSpec, cover: CoverInfo) -> str:
    title = escape(spec.metadata.title or 'Portada')
    return XHTML_OPEN.format(lang=_lang(spec)) + f"""<head>
    <meta charset="UTF-8"/>
    <title>{title}</title>
    <style>
        html, body {{ margin: 0; padding: 0; width: 100%; height: 100%; }}
        body {{ display: flex; align-items: center; justify-content: center; background: #fff; }}
        img {{ max-width: 100%; max-height: 100%; object-fit: contain; }}
    </style>
</head>
<body epub:type="cover">
    <img src="cover.{cover.extension}" alt="{title}"/>
</body>
</html>
"""


def toc_page(spec: BookSpec) -> str:
    """toc-page.xhtml: the visible index, listed in the spine before the chapters."""
    title = escape(spec.toc_page.title)
    entries = collect_toc_entries(list(spec.chapters), spec.toc_page.depth)
    return XHTML_OPEN.format(lang=_lang(spec)) + f"""<head>
    <meta charset="UTF-8"/>
    <title>{title}</title>
    {_css_link(spec)}
</head>
<body{_body_class(spec)} epub:type="toc">
    <section>
        <h1>{title}</h1>
        <nav>
            <ol class="toc-list">{render_toc_list(entries, indent='                ')}
            </ol>
        </nav>
    </section>
</body>
</html>
"""


def chapter_document(spec: BookSpec, chapter: Chapter) -> str:
    """<chapter id>.xhtml: content with heading ids, re-serialized as XHTML inside a typed <section>."""
    epub_type = role_to_epub_type(chapter.role)
    type_attr = f' epub:type="{epub_type}"' if epub_type else ''
    body = to_xhtml(add_heading_ids(chapter.content, chapter.id))
    return XHTML_OPEN.format(lang=_lang(spec)) + f"""<head>
    <meta charset="UTF-8"/>
    <title>{escape(chapter.title)}</title>
    {_css_link(spec)}
</head>
<body{_body_class(spec)}>
    <section{type_attr}>
        {body}
    </section>
</body>
</html>
"""
