"""Root test configuration: in-memory DOCX and Markdown book fixtures"""

import io

import pytest
from docx import Document


BOOK_MD = """\
---
title: El faro
author: Ana Pérez
lang: es
toc: true
tocDepth: 2
dedication: Para *Lucía*.
colophon: Compuesto en Garamond.
---

# Primera parte

Era una noche "oscura" -- muy oscura.

## La tormenta

El viento soplaba.

# Segunda parte

El faro seguía encendido.

# Tercera parte

Fin.
"""


def build_docx(blocks) -> bytes:
    """Build a DOCX from (kind, text) pairs.

    kind is 'h0'..'h6' (h0 = Title style), 'p', 'bold', 'empty', 'bullet' or 'number'.
    """
    doc = Document()
    for kind, text in blocks:
        if kind.startswith('h'):
            doc.add_heading(text, level=int(kind[1]))
        elif kind == 'bold':
            doc.add_paragraph().add_run(text).bold = True
        elif kind == 'empty':
            doc.add_paragraph('')
        elif kind == 'bullet':
            doc.add_paragraph(text, style='List Bullet')
        elif kind == 'number':
            doc.add_paragraph(text, style='List Number')
        else:
            doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture(name="make_docx")
def make_docx_fixture():
    return build_docx


@pytest.fixture(name="book_md")
def book_md_fixture():
    return BOOK_MD
