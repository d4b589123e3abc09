import dataclasses
import json
import logging
import sys
from pathlib import Path

import click

from .cache import build_cache
from .chordpro import ChordProFormatter
from .config import settings
from .exceptions import FetchError, InvalidInputError
from .fetchers.browser import BrowserFetcher
from .models import ChordSheet, NotFound
from .service import scrape_song, search_songs

EXIT_FAILED = 1
EXIT_INVALID = 2


def _dump(payload) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _fail(message: str, code: int = EXIT_FAILED) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(code)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Search cifraclub.com.br and turn its song pages into structured data."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("query")
@click.option("--limit", type=int, default=None, metavar="N",
              help="Maximum number of results (default: 5 scraped, 10 via the search API).")
def search(query: str, limit: int | None) -> None:
    """Search for songs and print the hits as JSON."""
    config = settings
    if limit is not None:
        config = dataclasses.replace(settings, search_limit=limit, api_search_limit=limit)

    try:
        hits = search_songs(query, settings=config)
    except InvalidInputError as exc:
        _fail(str(exc), EXIT_INVALID)

    click.echo(_dump([hit.to_dict() for hit in hits]))


@main.command()
@click.argument("url")
@click.option("--browser", is_flag=True, default=False,
              help="Render the page in headless Chromium instead of a plain GET.")
@click.option("--no-cache", is_flag=True, default=False, help="Bypass the result cache.")
@click.option("--format", "output_format", type=click.Choice(["json", "chordpro"]),
              default="json", show_default=True, help="Output format.")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write to PATH instead of stdout.")
def scrape(url: str, browser: bool, no_cache: bool, output_format: str,
           output_path: str | None) -> None:
    """Fetch a song or artist page and print it as JSON or ChordPro.

    \b
    Song pages give {"type": "cifra", "artist", "song", "content", "videoId"}.
    Artist pages give {"type": "artist", "artist", "songs": [{title, url}]}.
    """
    fetcher = BrowserFetcher(settings) if browser else None
    cache = None if no_cache else build_cache(settings)

    # --- Fetch + classify ---
    try:
        result = scrape_song(url, fetcher=fetcher, cache=cache, settings=settings)
    except InvalidInputError as exc:
        _fail(str(exc), EXIT_INVALID)
    except FetchError as exc:
        msg = f"Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        elif exc.reason:
            msg += f" ({exc.reason})"
        if exc.status_code == 403 and not browser:
            msg += " - try --browser"
        _fail(msg)
    finally:
        if cache is not None:
            cache.close()

    if isinstance(result, NotFound):
        _fail(f"No chord sheet or song list found at {url}")

    # --- Render ---
    if output_format == "chordpro":
        if not isinstance(result, ChordSheet):
            _fail("ChordPro output needs a song page; this is an artist page")
        text = ChordProFormatter().render(result)
    else:
        text = _dump(result.to_dict()) + "\n"

    # --- Output ---
    if output_path is None:
        click.echo(text, nl=False)
        return

    dest = Path(output_path)
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}")
