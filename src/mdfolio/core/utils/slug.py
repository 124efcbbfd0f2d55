"""Slug generation for heading anchors and file names"""

import re


_ASCII_RUN_RE = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def anchor_slug(text: str) -> str:
    """ASCII-only slug: lowercased, every non-alphanumeric run collapsed to one hyphen."""
    return _ASCII_RUN_RE.sub('-', text.strip().lower()).strip('-')


def safe_id(value: str) -> str:
    """Prefix ids that start with a digit; CSS selectors cannot."""
    return f"s-{value}" if value[:1].isdigit() else value


def unique_id(base: str, used: set[str]) -> str:
    """Return base, or base-N for the first N >= 2 not yet in used. Records the result."""
    candidate, n = base, 2
    while candidate in used:
        candidate = f"{base}-{n}"
        n += 1
    used.add(candidate)
    return candidate
