"""Shared extraction helpers used by the site adapters.

  1. first_success()         — run fallible strategies in order, first hit wins
  2. normalize_chord_block() — <b>G</b> chord markup → inline [G] notation
  3. extract_video_id()      — video id from the data island or an embed frame
  4. clean_title()           — strip the site brand and separators from a title
  5. canonical_url()         — collapse "simplified" arrangement URLs
  6. collect_hits()          — filter, canonicalise and deduplicate candidates

A strategy is any callable returning a value on success and ``None`` when
its shape is not present.
"""

import copy
import json
import logging
import re
from collections.abc import Callable, Iterable, Sequence
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from ..exceptions import ParseError
from ..models import SearchHit, belongs_to_domain

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# The site has stored the video id at both of these paths over time.
DATA_ISLAND_ID = "__NEXT_DATA__"
VIDEO_ID_PATHS: tuple[tuple[str, ...], ...] = (
    ("props", "pageProps", "song", "video", "youtubeId"),
    ("props", "pageProps", "initialState", "cifra", "video", "youtubeId"),
)

EMBED_SRC_RE = re.compile(r"youtube(?:-nocookie)?\.com/embed/[^/?#]+", re.IGNORECASE)

SIMPLIFIED_SUFFIX = "simplificada.html"

# Path segment of lyrics-only pages (no chords).
LYRICS_SEGMENT = "letra"

# Separators left dangling once the brand is removed: "Wonderwall - Cifra Club"
_TITLE_STRIP_CHARS = " -|–—:"


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------


def first_success(strategies: Sequence[Callable], *args, **kwargs):
    """Call each strategy with the same arguments; return the first non-None result."""
    for strategy in strategies:
        result = strategy(*args, **kwargs)
        if result is not None:
            logger.debug("%s matched", getattr(strategy, "__name__", strategy))
            return result
    return None


# ---------------------------------------------------------------------------
# Chord markup
# ---------------------------------------------------------------------------


def normalize_chord_block(block: Tag) -> str:
    """Return the plain text of a chord block with chords in bracket notation.

    Every ``<b>`` element is replaced by its text wrapped in brackets, then the
    text of the whole block is taken, so any other inline markup disappears
    while its text stays in place::

        <pre>Intro: <b>G</b> <b>D</b></pre>  →  "Intro: [G] [D]"

    The element passed in is left untouched.
    """
    block = copy.copy(block)
    for chord in block.find_all("b"):
        chord.replace_with(f"[{chord.get_text()}]")
    return block.get_text()


# ---------------------------------------------------------------------------
# Video identifier
# ---------------------------------------------------------------------------


def load_data_island(soup: BeautifulSoup) -> dict | None:
    """Return the decoded hydration data, or None when the page has none.

    Raises ParseError if the script tag is present but not valid JSON.
    """
    script = soup.find("script", id=DATA_ISLAND_ID)
    if script is None or not script.string:
        return None
    try:
        data = json.loads(script.string)
    except json.JSONDecodeError as exc:
        raise ParseError(DATA_ISLAND_ID, str(exc)) from exc
    if not isinstance(data, dict):
        raise ParseError(DATA_ISLAND_ID, f"expected an object, got {type(data).__name__}")
    return data


def _dig(data, path: Sequence[str]):
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def video_id_from_data_island(soup: BeautifulSoup) -> str | None:
    try:
        data = load_data_island(soup)
    except ParseError as exc:
        logger.warning("Ignoring data island: %s", exc)
        return None
    if data is None:
        return None
    for path in VIDEO_ID_PATHS:
        value = _dig(data, path)
        if value and isinstance(value, str):
            return value
    return None


def video_id_from_embed(soup: BeautifulSoup) -> str | None:
    for frame in soup.find_all("iframe"):
        src = frame.get("src") or frame.get("data-src") or ""
        if not EMBED_SRC_RE.search(src):
            continue
        # Last path segment, query string and fragment dropped.
        segment = urlsplit(src).path.rstrip("/").rsplit("/", 1)[-1]
        if segment:
            return segment
    return None


VIDEO_ID_STRATEGIES = (video_id_from_data_island, video_id_from_embed)


def extract_video_id(soup: BeautifulSoup) -> str | None:
    """Best-effort video id for a song page; None when the page has none."""
    return first_success(VIDEO_ID_STRATEGIES, soup)


# ---------------------------------------------------------------------------
# Search candidates
# ---------------------------------------------------------------------------


def clean_title(title: str, brand: str) -> str:
    """Remove *brand* (case-insensitive) and leftover separators from *title*."""
    if brand:
        title = re.sub(re.escape(brand), "", title, flags=re.IGNORECASE)
    title = " ".join(title.split())
    return title.strip(_TITLE_STRIP_CHARS)


def canonical_url(url: str) -> str:
    """Map a simplified-arrangement URL onto the standard arrangement's URL.

    ``https://www.cifraclub.com.br/x/y/simplificada.html`` →
    ``https://www.cifraclub.com.br/x/y/``
    """
    parts = urlsplit(url.strip())
    path = parts.path
    if path.endswith("/" + SIMPLIFIED_SUFFIX):
        path = path[: -len(SIMPLIFIED_SUFFIX)]
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


def is_lyrics_url(url: str) -> bool:
    segments = [s for s in urlsplit(url).path.split("/") if s]
    return LYRICS_SEGMENT in segments


def collect_hits(
    candidates: Iterable[tuple[str, str]],
    domain: str,
    brand: str,
    limit: int | None = None,
    drop_lyrics: bool = False,
) -> list[SearchHit]:
    """Turn raw ``(title, url)`` candidates into a clean, deduplicated hit list.

    Candidates keep their order; for each canonical URL the first candidate
    wins, and the canonical URL is what gets emitted.
    """
    hits: list[SearchHit] = []
    seen: set[str] = set()
    for raw_title, raw_url in candidates:
        if limit is not None and len(hits) >= limit:
            break
        title = clean_title(raw_title or "", brand)
        url = (raw_url or "").strip()
        if not title or not belongs_to_domain(url, domain):
            continue
        if drop_lyrics and is_lyrics_url(url):
            continue
        url = canonical_url(url)
        if url in seen:
            continue
        seen.add(url)
        hits.append(SearchHit(title=title, url=url))
    return hits
