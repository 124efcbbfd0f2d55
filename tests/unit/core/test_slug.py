"""Unit tests for core/utils/slug.py"""

import pytest

from mdfolio.core.utils.slug import anchor_slug, safe_id, slugify, unique_id


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("Capítulo único", "capítulo-único"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to lowercase hyphenated slug, keeping unicode letters."""
    assert slugify(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("La Tormenta", "la-tormenta"),
    ("¿Qué pasó?", "qu-pas"),
    ("Part 2: The End!", "part-2-the-end"),
    ("!!!", ""),
])
def test_anchor_slug_is_ascii_only(text, expected):
    """anchor_slug collapses every non [a-z0-9] run to a single hyphen."""
    assert anchor_slug(text) == expected


def test_safe_id_prefixes_leading_digit():
    """safe_id prefixes values that start with a digit."""
    assert safe_id("1-intro") == "s-1-intro"
    assert safe_id("intro") == "intro"
    assert safe_id("") == ""


def test_unique_id_appends_counter():
    """unique_id returns base, then base-2, base-3 and records each result."""
    used = set()
    assert unique_id("notes", used) == "notes"
    assert unique_id("notes", used) == "notes-2"
    assert unique_id("notes", used) == "notes-3"
    assert used == {"notes", "notes-2", "notes-3"}
