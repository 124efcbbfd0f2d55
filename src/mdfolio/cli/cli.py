"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from mdfolio.cli.commands import docx_cmd, epub_cmd, html_cmd, outline_cmd


app = typer.Typer(name="mdfolio", no_args_is_help=True, help="Book formatting: DOCX -> Markdown -> HTML/EPUB")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress to stderr")] = False,
    ):
    """Configure logging once for every command."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command(name="docx")(docx_cmd)
app.command(name="html")(html_cmd)
app.command(name="epub")(epub_cmd)
app.command(name="outline")(outline_cmd)
