"""EPUB 3 builder: collect metadata, cover, stylesheet and chapters, then write one archive.

EpubBook is the only mutable object of the packaging engine. build() freezes
its state into a BookSpec, and render_epub() turns a BookSpec into archive
bytes without touching the builder. A book that has been generated is
finished: any further mutation or generation raises EpubValidationError.
"""

import io
import logging
import uuid as uuidlib
import zipfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from mdfolio.core.epub.cover import decode_cover
from mdfolio.core.epub.documents import (
    chapter_document,
    container_xml,
    cover_page,
    nav_document,
    package_document,
    toc_page,
)
from mdfolio.core.epub.errors import EpubValidationError
from mdfolio.core.epub.models import BookMetadata, BookSpec, Chapter, TocPageConfig


logger = logging.getLogger(__name__)

MIMETYPE = "application/epub+zip"


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    field = '.'.join(str(p) for p in err['loc']) or 'value'
    return f"{field}: {err['msg']}"


def render_epub(spec: BookSpec) -> bytes:
    """Write the OCF container for spec; mimetype first and uncompressed, everything else deflated.

    Raises CoverDecodeError when the cover payload is malformed.
    """
    cover = decode_cover(spec.cover) if spec.cover else None

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
        zf.writestr('mimetype', MIMETYPE, compress_type=zipfile.ZIP_STORED)
        zf.writestr('META-INF/container.xml', container_xml())
        zf.writestr('OEBPS/content.opf', package_document(spec, cover))
        zf.writestr('OEBPS/nav.xhtml', nav_document(spec))
        if spec.stylesheet:
            zf.writestr('OEBPS/styles.css', spec.stylesheet)
        if cover:
            zf.writestr(f'OEBPS/cover.{cover.extension}', cover.data)
            zf.writestr('OEBPS/cover.xhtml', cover_page(spec, cover))
        if spec.toc_page.enabled:
            zf.writestr('OEBPS/toc-page.xhtml', toc_page(spec))
        for chapter in spec.chapters:
            zf.writestr(f'OEBPS/{chapter.id}.xhtml', chapter_document(spec, chapter))

    data = buffer.getvalue()
    logger.info("Packaged %d chapter(s) into %d bytes", len(spec.chapters), len(data))
    return data


class EpubBook:
    """Single-use EPUB builder."""

    def __init__(self):
        self._uuid = str(uuidlib.uuid4())
        self._metadata = BookMetadata()
        self._cover: Optional[Union[str, bytes]] = None
        self._stylesheet = ""
        self._body_class = ""
        self._toc_page = TocPageConfig()
        self._chapters: list[Chapter] = []
        self._generated = False

    @property
    def uuid(self) -> str:
        return self._uuid

    def _check_open(self) -> None:
        if self._generated:
            raise EpubValidationError("The book has already been generated")

    # --- metadata ---

    def set_metadata(self, metadata: Mapping[str, Any]) -> None:
        """Merge metadata into the current values; keys set to None are left unchanged."""
        self._check_open()
        if not isinstance(metadata, Mapping):
            raise EpubValidationError("Metadata must be a mapping of field names to strings")
        merged = self._metadata.model_dump()
        merged.update({k: v for k, v in metadata.items() if v is not None})
        try:
            self._metadata = BookMetadata(**merged)
        except ValidationError as e:
            raise EpubValidationError(f"Invalid metadata: {_first_error(e)}") from e

    def get_metadata(self) -> BookMetadata:
        return self._metadata

    # --- cover, stylesheet, body class ---

    def set_cover(self, payload: Optional[Union[str, bytes]]) -> None:
        """Store a cover (data URL or image bytes). It is decoded only when the book is generated."""
        self._check_open()
        if payload is not None and not isinstance(payload, (str, bytes, bytearray)):
            raise EpubValidationError("Cover must be a data URL string or image bytes")
        self._cover = bytes(payload) if isinstance(payload, bytearray) else (payload or None)

    def get_cover(self) -> Optional[Union[str, bytes]]:
        return self._cover

    def set_stylesheet(self, css: str) -> None:
        self._check_open()
        if not isinstance(css, str):
            raise EpubValidationError("Stylesheet must be a string")
        self._stylesheet = css

    def get_stylesheet(self) -> str:
        return self._stylesheet

    def set_body_class(self, class_name: str) -> None:
        self._check_open()
        if not isinstance(class_name, str):
            raise EpubValidationError("Body class must be a string")
        self._body_class = class_name

    def get_body_class(self) -> str:
        return self._body_class

    # --- toc page ---

    def enable_toc_page(self, title: Optional[str] = None, depth: Optional[int] = None) -> None:
        """Add a visible index page after the cover; depth is clamped to 1..3."""
        self._check_open()
        self._toc_page = TocPageConfig(enabled=True, title=title or TocPageConfig().title, depth=depth or 1)

    def disable_toc_page(self) -> None:
        self._check_open()
        self._toc_page = self._toc_page.model_copy(update={"enabled": False})

    def get_toc_page(self) -> TocPageConfig:
        return self._toc_page

    # --- chapters ---

    def add_chapter(self, chapter: Union[Chapter, Mapping[str, Any]]) -> Chapter:
        """Validate and append a chapter. Raises EpubValidationError on bad data or a duplicate id."""
        self._check_open()
        if not isinstance(chapter, Chapter):
            if not isinstance(chapter, Mapping):
                raise EpubValidationError("Chapter must be a Chapter or a mapping")
            try:
                chapter = Chapter.model_validate(dict(chapter))
            except ValidationError as e:
                raise EpubValidationError(f"Invalid chapter: {_first_error(e)}") from e
        if any(ch.id == chapter.id for ch in self._chapters):
            raise EpubValidationError(f"A chapter with id '{chapter.id}' already exists")
        self._chapters.append(chapter)
        return chapter

    def get_chapters(self) -> list[Chapter]:
        return list(self._chapters)

    def clear_chapters(self) -> None:
        self._check_open()
        self._chapters = []

    # --- output ---

    def build(self) -> BookSpec:
        """Freeze the current state. Raises EpubValidationError when there are no chapters."""
        if not self._chapters:
            raise EpubValidationError("At least one chapter is required to generate a book")
        return BookSpec(
            uuid=self._uuid,
            metadata=self._metadata,
            chapters=tuple(self._chapters),
            cover=self._cover,
            stylesheet=self._stylesheet,
            body_class=self._body_class,
            toc_page=self._toc_page,
        )

    def generate(self) -> bytes:
        self._check_open()
        data = render_epub(self.build())
        self._generated = True
        return data

    def write(self, path: Union[str, Path]) -> Path:
        """Generate the archive and write it to path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.generate())
        return path
