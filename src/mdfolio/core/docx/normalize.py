"""Scene-break and whitespace normalization for Markdown produced from DOCX.

HTML to Markdown conversion drops empty paragraphs, which loses the
difference between one blank line (ignorable) and several (a scene break).
The two halves of this module form a small protocol around that loss:

- ``mark_empty_paragraphs`` runs on the HTML tree *before* conversion and
  writes EMPTY_LINE_TOKEN into every visually empty paragraph.
- ``normalize_markdown`` runs on the Markdown *after* conversion, counts
  consecutive tokens and turns long enough runs into the canonical ``***``.

Pass order in ``normalize_markdown`` is fixed: tokens, then visual
separators, then consolidation, then heading/start stripping, then
whitespace. Each pass expects the canonical form the previous one produced.
"""

import re

from bs4 import BeautifulSoup


EMPTY_LINE_TOKEN = "[[EMPTY_LINE]]"
SCENE_BREAK = "***"

# the Markdown converter may escape brackets and underscores in the token
TOKEN_RE = re.compile(r'\\?\[\\?\[EMPTY\\?_LINE\\?\]\\?\]')
_TOKEN_RUN_RE = re.compile(rf'(?:{TOKEN_RE.pattern}\s*)+')

_SEPARATOR_LINE_RES = (
    re.compile(r'^[ \t]*(?:\\?\*[ \t]*){3,}$'),     # *** or * * * (escaped or not)
    re.compile(r'^[ \t]*(?:-[ \t]*){3,}$'),         # --- or - - -
    re.compile(r'^[ \t]*(?:\\?_[ \t]*){3,}$'),      # ___ (escaped or not)
    re.compile(r'^[ \t]*\\?\*[ \t]*$'),             # a lone *
)
_HEADING_LINE_RE = re.compile(r'^#{1,6}\s')


def mark_empty_paragraphs(soup: BeautifulSoup) -> int:
    """Replace the content of every visually empty <p> with EMPTY_LINE_TOKEN. Returns the count."""
    count = 0
    for p in soup.find_all('p'):
        if p.get_text().strip() or p.find('img'):
            continue
        p.clear()
        p.append(EMPTY_LINE_TOKEN)
        count += 1
    return count


def is_token_text(text: str) -> bool:
    """True if text carries an empty-paragraph token."""
    return bool(TOKEN_RE.search(text))


def strip_tokens(markdown: str) -> str:
    """Drop every token without inserting separators."""
    return _TOKEN_RUN_RE.sub('', markdown)


def insert_scene_separators(markdown: str, threshold: int = 2) -> str:
    """Turn runs of >= threshold tokens into a scene break; shorter runs vanish."""
    def _replace(m: re.Match) -> str:
        count = len(TOKEN_RE.findall(m.group(0)))
        return f"\n\n{SCENE_BREAK}\n\n" if count >= threshold else ''
    return _TOKEN_RUN_RE.sub(_replace, markdown)


def _is_separator_line(line: str) -> bool:
    return any(r.match(line) for r in _SEPARATOR_LINE_RES)


def normalize_separators(markdown: str) -> str:
    """Rewrite visual separators (* * *, ---, a lone *) to the canonical *** on its own line."""
    out: list[str] = []
    for line in markdown.split('\n'):
        if _is_separator_line(line):
            out.extend(['', SCENE_BREAK, ''])
        else:
            out.append(line)
    return '\n'.join(out)


def _last_content(lines: list[str]) -> str | None:
    for line in reversed(lines):
        if line.strip():
            return line
    return None


def consolidate_separators(markdown: str) -> str:
    """Collapse consecutive scene breaks (blank lines in between) into one."""
    out: list[str] = []
    for line in markdown.split('\n'):
        if line.strip() == SCENE_BREAK and _last_content(out) == SCENE_BREAK:
            continue
        out.append(line)
    return '\n'.join(out)


def strip_misplaced_separators(markdown: str) -> str:
    """Drop scene breaks right before a heading and at the start of the document."""
    lines = markdown.split('\n')
    out: list[str] = []
    for i, line in enumerate(lines):
        if line.strip() == SCENE_BREAK:
            following = next((l for l in lines[i + 1:] if l.strip()), None)
            if following is not None and _HEADING_LINE_RE.match(following):
                continue
            if _last_content(out) is None:
                continue
        out.append(line)
    return '\n'.join(out)


def clean_whitespace(markdown: str, max_blank_lines: int = 2) -> str:
    """Trim trailing whitespace per line, cap blank runs, one blank line around each scene break."""
    out: list[str] = []
    blanks = 0
    for line in markdown.split('\n'):
        line = line.rstrip()
        if not line:
            blanks += 1
            continue
        if out:
            gap = 1 if line == SCENE_BREAK or out[-1] == SCENE_BREAK else min(blanks, max_blank_lines)
            out.extend([''] * gap)
        out.append(line)
        blanks = 0
    return '\n'.join(out)


def normalize_markdown(
    markdown: str,
    threshold: int = 2,
    scene_separators: bool = True,
    clean: bool = True,
    ) -> str:
    """Run every normalization pass in order. Idempotent on its own output."""
    if scene_separators:
        markdown = insert_scene_separators(markdown, threshold)
    else:
        markdown = strip_tokens(markdown)
    markdown = normalize_separators(markdown)
    markdown = consolidate_separators(markdown)
    markdown = strip_misplaced_separators(markdown)
    if clean:
        markdown = clean_whitespace(markdown)
    return markdown.strip()
