"""Adapter for www.cifraclub.com.br.

Song page (chord sheet)::

    <h1 class="t1">Song</h1>
    <h2 class="t3"><a class="t1">Artist</a></h2>
    <div class="cifra_cnt">
        <pre>Intro: <b>G</b> <b>D</b> ...</pre>     chords marked with <b>
    </div>
    <script id="__NEXT_DATA__">{...video id...}</script>   optional
    <iframe src="https://www.youtube.com/embed/<id>?...">  optional

Artist page::

    <h1 class="t1">Artist</h1>
    <ol class="list-links art_musics top-songs">
        <li><a class="al-link" href="/artist/song/">Song</a></li>
    </ol>

Artist pages may also carry an empty ``<pre>``; the chord-sheet shape only
matches when the chord block has text, so those still classify as artist
listings.

Search page (``/?q=...``): results come from a Google Programmable Search
widget rendered client-side, so this needs the browser fetcher.  Each
result is an ``<a class="gs-title">`` whose ``data-ctorig`` attribute holds
the real target (``href`` is a Google redirect).
"""

import logging
from urllib.parse import urlencode, urljoin

from bs4 import BeautifulSoup

from ..config import Settings, settings as default_settings
from ..exceptions import FetchError, InvalidInputError
from ..fetchers.base import Fetcher
from ..fetchers.http import HttpFetcher
from ..models import (
    ArtistListing,
    ChordSheet,
    ExtractionResult,
    NotFound,
    SearchHit,
    belongs_to_domain,
)
from ..search_api import GoogleSearchAPI
from .base import SiteAdapter
from .utils import collect_hits, extract_video_id, first_success, normalize_chord_block

logger = logging.getLogger(__name__)

RESULT_LINK_SELECTOR = "a.gs-title"
RESULT_LINK_SELECTORS = ("div.gsc-webResult " + RESULT_LINK_SELECTOR, RESULT_LINK_SELECTOR)

CHORD_BLOCK_SELECTORS = ("div.cifra_cnt pre", "pre")
SONG_TITLE_SELECTOR = "h1.t1"
SONG_ARTIST_SELECTOR = "h2.t3 a.t1"

TOP_SONGS_SELECTORS = ("ol.list-links.art_musics.top-songs a.al-link", "ol.top-songs a")
ARTIST_NAME_SELECTOR = "h1.t1"

_UNSET = object()


def _text(element) -> str:
    return element.get_text(strip=True) if element is not None else ""


def _select_first(soup: BeautifulSoup, selectors) -> list:
    """Return the matches of the first selector that matches anything."""
    for selector in selectors:
        found = soup.select(selector)
        if found:
            return found
    return []


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _search_candidates(soup: BeautifulSoup, domain: str):
    for link in _select_first(soup, RESULT_LINK_SELECTORS):
        url = link.get("data-ctorig")
        if not url:
            href = link.get("href") or ""
            url = href if belongs_to_domain(href, domain) else ""
        yield link.get_text(), url


def extract_search_results(
    html: str, settings: Settings | None = None, limit: int | None = None
) -> list[SearchHit]:
    """Return the search hits on a rendered search page.

    ``limit`` caps the number of hits; None means no cap.  A page without
    result links yields an empty list.
    """
    settings = settings or default_settings
    soup = BeautifulSoup(html, "html.parser")
    return collect_hits(
        _search_candidates(soup, settings.site_domain),
        domain=settings.site_domain,
        brand=settings.brand,
        limit=limit,
    )


# ---------------------------------------------------------------------------
# Content classification
# ---------------------------------------------------------------------------


def _chord_sheet(soup: BeautifulSoup, settings: Settings, url: str) -> ChordSheet | None:
    blocks = _select_first(soup, CHORD_BLOCK_SELECTORS)
    if not blocks:
        return None
    content = normalize_chord_block(blocks[0])
    if not content.strip():
        return None
    return ChordSheet(
        artist=_text(soup.select_one(SONG_ARTIST_SELECTOR)),
        song=_text(soup.select_one(SONG_TITLE_SELECTOR)),
        content=content,
        video_id=extract_video_id(soup),
        url=url,
    )


def _artist_listing(soup: BeautifulSoup, settings: Settings, url: str) -> ArtistListing | None:
    origin = settings.base_url.rstrip("/") + "/"
    songs = []
    for link in _select_first(soup, TOP_SONGS_SELECTORS):
        title = link.get_text(strip=True)
        href = (link.get("href") or "").strip()
        if title and href:
            songs.append(SearchHit(title=title, url=urljoin(origin, href)))
    if not songs:
        return None
    return ArtistListing(
        artist=_text(soup.select_one(ARTIST_NAME_SELECTOR)),
        songs=tuple(songs),
        url=url,
    )


# Order matters: song pages can also carry unrelated song lists.
CONTENT_STRATEGIES = (_chord_sheet, _artist_listing)


def extract_content(
    html: str, settings: Settings | None = None, url: str = ""
) -> ExtractionResult:
    """Classify a page as a chord sheet, an artist listing, or NotFound."""
    settings = settings or default_settings
    soup = BeautifulSoup(html, "html.parser")
    result = first_success(CONTENT_STRATEGIES, soup, settings, url)
    if result is None:
        logger.debug("No known content shape on %s", url or "page")
        return NotFound(url=url)
    return result


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class CifraClubAdapter(SiteAdapter):
    """Adapter for cifraclub.com.br song, artist and search pages.

    ``fetcher`` loads song and artist pages (static HTML by default);
    ``search_fetcher`` loads the search page, which must be rendered.
    ``search_api`` replaces page scraping for search when given; by default
    it is built from the settings when API credentials are configured.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: Fetcher | None = None,
        search_fetcher: Fetcher | None = None,
        search_api=_UNSET,
    ):
        self.settings = settings or default_settings
        self.fetcher = fetcher or HttpFetcher(self.settings)
        self._search_fetcher = search_fetcher
        if search_api is _UNSET:
            search_api = GoogleSearchAPI.from_settings(self.settings)
        self.search_api = search_api

    @classmethod
    def can_handle(cls, url: str, settings: Settings | None = None) -> bool:
        settings = settings or default_settings
        return belongs_to_domain(url, settings.site_domain)

    @property
    def search_fetcher(self) -> Fetcher:
        if self._search_fetcher is None:
            # Playwright is only imported once a rendered search is needed.
            from ..fetchers.browser import BrowserFetcher  # noqa: PLC0415

            self._search_fetcher = BrowserFetcher(self.settings)
        return self._search_fetcher

    def fetch(self, url: str, headers: dict | None = None, timeout: float | None = None) -> str:
        return self.fetcher.fetch(url, headers=headers, timeout=timeout).html

    def extract(self, html: str, url: str) -> ExtractionResult:
        return extract_content(html, self.settings, url)

    def search(self, query: str) -> list[SearchHit]:
        query = (query or "").strip()
        if not query:
            raise InvalidInputError(query, "a search query is required")
        try:
            if self.search_api is not None:
                hits = self._search_with_api(query)
            else:
                hits = self._search_page(query)
        except FetchError as exc:
            logger.info("No search results for %r: %s", query, exc)
            return []
        except Exception:
            logger.warning("Search for %r failed", query, exc_info=True)
            return []
        logger.info("Search for %r: %d result(s)", query, len(hits))
        return hits

    def _search_page(self, query: str) -> list[SearchHit]:
        url = f"{self.settings.search_url}?{urlencode({'q': query})}"
        page = self.search_fetcher.fetch(url, wait_for=RESULT_LINK_SELECTOR)
        return extract_search_results(page.html, self.settings, limit=self.settings.search_limit)

    def _search_with_api(self, query: str) -> list[SearchHit]:
        limit = self.settings.api_search_limit
        items = self.search_api.search(query, limit=limit)
        return collect_hits(
            ((item["title"], item["url"]) for item in items),
            domain=self.settings.site_domain,
            brand=self.settings.brand,
            limit=limit,
            drop_lyrics=True,
        )
