from abc import ABC, abstractmethod

from ..config import Settings, settings as default_settings
from ..models import RawPage


def default_headers(settings: Settings | None = None) -> dict[str, str]:
    """Browser-like request headers.

    The site rejects or alters responses for clients without them.
    """
    settings = settings or default_settings
    return {
        "User-Agent": settings.user_agent,
        "Accept-Language": settings.accept_language,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/webp,*/*;q=0.8"
        ),
        "Referer": "https://www.google.com/",
    }


class Fetcher(ABC):
    """Retrieves raw HTML for a URL.

    Implementations are interchangeable: whatever produced the HTML, the
    extractors see the same thing.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        merged = default_headers(self.settings)
        if headers:
            merged.update(headers)
        return merged

    @abstractmethod
    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        wait_for: str | None = None,
        timeout: float | None = None,
    ) -> RawPage:
        """Fetch the page at url.

        ``wait_for`` is a CSS selector the page must contain before it is
        read; strategies that cannot wait ignore it.

        Raises FetchError on non-2xx responses, transport failures and
        timeouts.
        """
