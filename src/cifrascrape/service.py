"""Entry points for callers (the CLI, or an HTTP layer).

``scrape_song`` validates the URL, consults the cache, scrapes, and writes
successful classifications back.  ``search_songs`` validates the query and
otherwise never fails: internal faults come back as an empty list.
"""

import logging

from .adapters.base import SiteAdapter
from .adapters.cifraclub import CifraClubAdapter
from .cache import ResultCache
from .config import Settings, settings as default_settings
from .exceptions import InvalidInputError
from .fetchers.base import Fetcher
from .models import (
    ArtistListing,
    ChordSheet,
    ExtractionResult,
    PageQuery,
    SearchHit,
    result_from_dict,
)
from .registry import get_adapter

logger = logging.getLogger(__name__)

_CACHEABLE = (ChordSheet, ArtistListing)


def scrape_song(
    url: str,
    *,
    adapter: SiteAdapter | None = None,
    fetcher: Fetcher | None = None,
    cache: ResultCache | None = None,
    settings: Settings | None = None,
) -> ExtractionResult:
    """Return the chord sheet, artist listing or NotFound for *url*.

    ``fetcher`` selects the fetch strategy when no ``adapter`` is given.
    Raises InvalidInputError before any network call for a bad URL, and
    FetchError when the page cannot be retrieved.
    """
    settings = settings or default_settings
    query = PageQuery.from_url(url, settings)
    adapter = adapter or get_adapter(query.url, settings, fetcher=fetcher)

    if cache is not None:
        cached = cache.get(query.url)
        if cached is not None:
            try:
                result = result_from_dict(cached, url=query.url)
            except (ValueError, KeyError, TypeError):
                logger.warning("Ignoring malformed cache entry for %s", query.url)
            else:
                logger.info("Cache hit for %s", query.url)
                return result

    result = adapter.scrape(query.url, headers=query.headers, timeout=query.timeout)

    if cache is not None and isinstance(result, _CACHEABLE):
        cache.set(query.url, result.to_dict())
    return result


def search_songs(
    query: str,
    *,
    adapter: SiteAdapter | None = None,
    settings: Settings | None = None,
) -> list[SearchHit]:
    """Return search hits for *query*; empty when nothing is found or anything fails.

    Raises InvalidInputError for a blank query.
    """
    if not (query or "").strip():
        raise InvalidInputError(query or "", "a search query is required")
    adapter = adapter or CifraClubAdapter(settings=settings or default_settings)
    return adapter.search(query)
