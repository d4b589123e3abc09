from abc import ABC, abstractmethod

from ..models import ExtractionResult, SearchHit


class SiteAdapter(ABC):
    """Abstract base class for all site-specific adapters."""

    @classmethod
    @abstractmethod
    def can_handle(cls, url: str, settings=None) -> bool:
        """Return True if this adapter can handle the given URL."""

    @abstractmethod
    def fetch(self, url: str, headers: dict | None = None, timeout: float | None = None) -> str:
        """Fetch the page at url and return raw HTML.

        Raises FetchError on transport-level failures.
        """

    @abstractmethod
    def extract(self, html: str, url: str) -> ExtractionResult:
        """Classify the page and return exactly one result shape.

        A page matching no known shape yields NotFound; this never raises.
        """

    @abstractmethod
    def search(self, query: str) -> list[SearchHit]:
        """Return search hits for a free-text query.

        Raises InvalidInputError for a blank query.  Any other failure
        degrades to an empty list.
        """

    def scrape(
        self, url: str, headers: dict | None = None, timeout: float | None = None
    ) -> ExtractionResult:
        """Convenience method: fetch + extract."""
        html = self.fetch(url, headers=headers, timeout=timeout)
        return self.extract(html, url)
