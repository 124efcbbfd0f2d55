"""Shared fixtures for EPUB builder tests"""

import base64
import io
import zipfile
from xml.etree import ElementTree

import pytest
from bs4 import BeautifulSoup

from mdfolio.core.epub.book import EpubBook


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
OPF_NS = {"opf": "http://www.idpf.org/2007/opf", "dc": "http://purl.org/dc/elements/1.1/"}
COVER_URL = "data:image/png;base64," + base64.b64encode(PNG).decode()


class Archive:
    """Read-only view of generated EPUB bytes."""

    def __init__(self, data: bytes):
        self.zip = zipfile.ZipFile(io.BytesIO(data))

    def names(self) -> list[str]:
        return self.zip.namelist()

    def text(self, name: str) -> str:
        return self.zip.read(name).decode("utf-8")

    def soup(self, name: str) -> BeautifulSoup:
        return BeautifulSoup(self.text(name), "html.parser")

    def xml(self, name: str) -> ElementTree.Element:
        """Parse a member as XML; raises ParseError when it is not well-formed."""
        return ElementTree.fromstring(self.zip.read(name))

    def manifest_ids(self) -> list[str]:
        return [item.get("id") for item in self.xml("OEBPS/content.opf").iterfind("opf:manifest/opf:item", OPF_NS)]

    def spine(self) -> list[str]:
        return [ref.get("idref") for ref in self.xml("OEBPS/content.opf").iterfind("opf:spine/opf:itemref", OPF_NS)]


@pytest.fixture(name="book")
def book_fixture():
    book = EpubBook()
    book.set_metadata({"title": "El faro", "author": "Ana Pérez"})
    return book


@pytest.fixture(name="read_epub")
def read_epub_fixture():
    return Archive


@pytest.fixture(name="png")
def png_fixture():
    return PNG


@pytest.fixture(name="cover_url")
def cover_url_fixture():
    return COVER_URL


@pytest.fixture(name="opf_ns")
def opf_ns_fixture():
    return OPF_NS
