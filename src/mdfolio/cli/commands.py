"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdfolio.config import Settings, load_config
from mdfolio.core.epub.errors import EpubError
from mdfolio.core.models import BookFrontmatter, DocxOptions
from mdfolio.core.parse import combine_with_frontmatter, extract_headings, parse_frontmatter
from mdfolio.core.pipeline import docx_to_markdown, export_epub, sanitize_filename
from mdfolio.core.render import convert_document


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _target(out: Optional[str], settings: Settings, name: str) -> Path:
    """Explicit --out path, else name inside the configured output directory."""
    target = Path(out) if out else Path(settings.output_dir) / name
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def docx_cmd(
    path: Annotated[str, typer.Argument(help="DOCX file to convert")],
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="Markdown file to write")] = None,
    no_frontmatter: Annotated[bool, typer.Option("--no-frontmatter", help="Do not prepend title/author frontmatter")] = False,
    threshold: Annotated[Optional[int], typer.Option("--threshold", help="Empty paragraphs that make a scene break")] = None,
    ):
    """Convert a DOCX manuscript to Markdown, reporting every structural guess."""
    settings = _settings(overrides={"scene_break_threshold": threshold})
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    try:
        result = docx_to_markdown(data, DocxOptions.from_settings(settings))
    except ValueError as e:
        _fail(str(e))

    markdown = result.content
    metadata = result.metadata.model_dump(exclude_none=True)
    if metadata and not no_frontmatter:
        markdown = combine_with_frontmatter(metadata, markdown)

    target = _target(out, settings, f"{Path(path).stem}.md")
    target.write_text(markdown + "\n", encoding="utf-8")
    for warning in result.warnings:
        typer.echo(f"  warning: {warning}")
    typer.echo(f"{path} -> {target}")


def html_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to render")],
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="HTML file to write")] = None,
    lang: Annotated[Optional[str], typer.Option("--lang", help="Language code; defaults to frontmatter lang")] = None,
    ):
    """Render a Markdown book to HTML, one <section> per H1."""
    settings = _settings()
    text = _read_text(path)
    metadata, _ = parse_frontmatter(text)
    lang = lang or BookFrontmatter.from_metadata(metadata).lang or settings.language
    _, rendered = convert_document(text, lang)

    target = _target(out, settings, f"{Path(path).stem}.html")
    target.write_text(rendered, encoding="utf-8")
    typer.echo(f"{path} -> {target}")


def epub_cmd(
    path: Annotated[str, typer.Argument(help="Markdown book to package")],
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="EPUB file to write")] = None,
    cover: Annotated[Optional[str], typer.Option("--cover", help="Cover image file")] = None,
    css: Annotated[Optional[str], typer.Option("--css", help="Stylesheet; the built-in one when omitted")] = None,
    toc: Annotated[Optional[bool], typer.Option("--toc/--no-toc", help="Add a visible index page")] = None,
    toc_depth: Annotated[Optional[int], typer.Option("--toc-depth", min=1, max=3, help="Heading depth of the index")] = None,
    ):
    """Package a Markdown book (with frontmatter) as an EPUB 3 file."""
    settings = _settings()
    text = _read_text(path)
    stylesheet = _read_text(css) if css else None
    cover_data = None
    if cover:
        try:
            cover_data = Path(cover).read_bytes()
        except OSError as e:
            _fail(f"Cannot read {cover}", e)

    try:
        data = export_epub(text, css=stylesheet, cover=cover_data, settings=settings, toc=toc, toc_depth=toc_depth)
    except (EpubError, ValueError) as e:
        _fail("EPUB export failed", e)

    metadata, _ = parse_frontmatter(text)
    title = BookFrontmatter.from_metadata(metadata).title or Path(path).stem
    target = _target(out, settings, sanitize_filename(title))
    target.write_bytes(data)
    typer.echo(f"{path} -> {target} ({len(data)} bytes)")


def outline_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to outline")],
    ):
    """Print the heading outline of a Markdown file."""
    headings = extract_headings(_read_text(path))
    if not headings:
        typer.echo("No headings found.")
        raise typer.Exit(1)
    for h in headings:
        typer.echo(f"{'  ' * (h.level - 1)}{h.text}  (line {h.source_position}, #{h.anchor})")
