from dataclasses import dataclass, field
from urllib.parse import urlparse

from .config import Settings, settings as default_settings
from .exceptions import InvalidInputError


def belongs_to_domain(url: str, domain: str) -> bool:
    """Return True if *url* is an http(s) URL on *domain* or one of its subdomains."""
    try:
        parsed = urlparse(url)
    except ValueError:
        # e.g. an unbalanced "[" in the host
        return False
    if parsed.scheme not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


@dataclass(frozen=True)
class PageQuery:
    """A validated page URL plus the fetch configuration to use for it."""

    url: str
    headers: dict = field(default_factory=dict)
    timeout: float = 15.0

    @classmethod
    def from_url(cls, url: str | None, settings: Settings | None = None) -> "PageQuery":
        """Clean and validate *url*.

        Surrounding whitespace and one pair of double quotes are removed.
        Raises InvalidInputError for empty URLs and URLs outside the site.
        """
        settings = settings or default_settings
        cleaned = (url or "").strip()
        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] == '"':
            cleaned = cleaned[1:-1].strip()
        if not cleaned:
            raise InvalidInputError(url or "", "a URL is required")
        if not belongs_to_domain(cleaned, settings.site_domain):
            raise InvalidInputError(cleaned, f"URL is not on {settings.site_domain}")
        return cls(
            url=cleaned,
            headers={
                "User-Agent": settings.user_agent,
                "Accept-Language": settings.accept_language,
            },
            timeout=settings.request_timeout,
        )


@dataclass(frozen=True)
class RawPage:
    """A fetched HTML document. Discarded once it has been parsed."""

    url: str
    html: str
    status_code: int = 200


@dataclass(frozen=True)
class SearchHit:
    """A single search result or artist-listing entry."""

    title: str
    url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class ChordSheet:
    """A song page: chords embedded inline using bracket notation.

    Example content: "Intro: [G] [D]"
    """

    artist: str
    song: str
    content: str
    video_id: str | None = None
    url: str = ""

    def to_dict(self) -> dict:
        return {
            "type": "cifra",
            "artist": self.artist,
            "song": self.song,
            "content": self.content,
            "videoId": self.video_id,
        }


@dataclass(frozen=True)
class ArtistListing:
    """An artist page listing the artist's top songs."""

    artist: str
    songs: tuple[SearchHit, ...] = ()
    url: str = ""

    def to_dict(self) -> dict:
        return {
            "type": "artist",
            "artist": self.artist,
            "songs": [hit.to_dict() for hit in self.songs],
        }


@dataclass(frozen=True)
class NotFound:
    """The page was fetched but matched no known content shape."""

    url: str = ""

    def to_dict(self) -> dict:
        return {"type": "not_found"}


ExtractionResult = ChordSheet | ArtistListing | NotFound


def result_from_dict(data: dict, url: str = "") -> ExtractionResult:
    """Rebuild an ExtractionResult from its ``to_dict()`` form.

    Raises ValueError for an unknown ``type``.
    """
    kind = data.get("type")
    if kind == "cifra":
        return ChordSheet(
            artist=data.get("artist", ""),
            song=data.get("song", ""),
            content=data.get("content", ""),
            video_id=data.get("videoId"),
            url=url,
        )
    if kind == "artist":
        songs = tuple(SearchHit(title=s["title"], url=s["url"]) for s in data.get("songs", []))
        return ArtistListing(artist=data.get("artist", ""), songs=songs, url=url)
    if kind == "not_found":
        return NotFound(url=url)
    raise ValueError(f"Unknown result type: {kind!r}")
