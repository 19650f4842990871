import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from .config import load_settings
from .errors import PageParseError, PageSourceError
from .models import PortSelection
from .query import parse_query
from .report.jsonout import render_json
from .report.projection import DisplayOptions, build_lookup_result, build_search_result
from .report.style import PLAIN, TerminalStyler
from .report.text import render_text
from .source import PageSource
from .store import PortDatabase

logger = logging.getLogger(__name__)

app = typer.Typer(help="What-the-port: quickly lookup what a port is used for.")


def version_callback(value: bool):
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


def configure_logging(verbose: int, quiet: int) -> None:
    """INFO by default; each -v goes one level down, each -q one level up."""
    level = logging.INFO - 10 * verbose + 10 * quiet
    level = max(logging.DEBUG, min(logging.CRITICAL, level))
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command()
def lookup(
    query: str = typer.Argument(
        ...,
        metavar="QUERY",
        help="A port (`80`), a port and protocol (`443/udp`), or a plain text search term.",
    ),
    revision: Optional[int] = typer.Option(
        None, "--revision", "--rev", help="Page revision to use (default: latest available)."
    ),
    pull: bool = typer.Option(
        False, "--pull", "-p", "--online", help="Retrieve revisions from the network."
    ),
    show_links: bool = typer.Option(False, "--links", "-l", help="Show an additional link section."),
    show_notes_and_references: bool = typer.Option(
        False, "--references", "-r", "--refs", "--notes", help="Show notes and references in descriptions."
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Use machine-friendly JSON output."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More log output."),
    quiet: int = typer.Option(0, "--quiet", "-q", count=True, help="Less log output."),
    config: Optional[Path] = typer.Option(
        None, "--config", envvar="WTP_CONFIG", help="YAML settings file."
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", callback=version_callback, is_eager=True
    ),
):
    """Look up a port or search port descriptions."""
    configure_logging(verbose, quiet)
    try:
        settings = load_settings(config)
    except ValueError as e:
        typer.echo(f"Error: invalid settings: {e}", err=True)
        raise typer.Exit(1)

    try:
        _, page = PageSource(settings).get_page(revision, pull)
        db = PortDatabase.from_html(page)
    except (PageSourceError, PageParseError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    logger.debug(f"Loaded {len(db)} port records")

    options = DisplayOptions.from_settings(settings, show_links, show_notes_and_references)
    styler = PLAIN if json_output or not sys.stdout.isatty() else TerminalStyler()

    parsed = parse_query(query)
    if isinstance(parsed, PortSelection):
        result = build_lookup_result(db, parsed, options, styler)
    else:
        result = build_search_result(db, parsed, options, styler)

    if json_output:
        typer.echo(render_json(result))
    else:
        typer.echo(render_text(result, styler), nl=False)


def main():
    app()


if __name__ == "__main__":
    main()
