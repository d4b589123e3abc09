"""Structured search backend: Google Programmable Search (Custom Search JSON API).

Used instead of scraping the rendered search page when ``GOOGLE_API_KEY``
and ``GOOGLE_CSE_ID`` are configured.  The API returns at most 10 items per
request.
"""

import logging

import httpx

from .config import Settings, settings as default_settings
from .exceptions import FetchError

logger = logging.getLogger(__name__)

API_URL = "https://www.googleapis.com/customsearch/v1"
MAX_PAGE_SIZE = 10


class GoogleSearchAPI:
    """Thin client over the Custom Search JSON API."""

    def __init__(self, api_key: str, cse_id: str, settings: Settings | None = None):
        self.api_key = api_key
        self.cse_id = cse_id
        self.settings = settings or default_settings

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GoogleSearchAPI | None":
        """Return a client when credentials are configured, else None."""
        settings = settings or default_settings
        if not settings.search_api_enabled:
            return None
        return cls(settings.google_api_key, settings.google_cse_id, settings)

    def search(self, query: str, limit: int | None = None) -> list[dict]:
        """Return ``[{"title": ..., "url": ...}]`` in ranking order.

        Raises FetchError on transport or HTTP failures.
        """
        num = min(limit or MAX_PAGE_SIZE, MAX_PAGE_SIZE)
        params = {"key": self.api_key, "cx": self.cse_id, "q": query, "num": num}
        try:
            resp = httpx.get(API_URL, params=params, timeout=self.settings.request_timeout)
        except httpx.RequestError as exc:
            raise FetchError(API_URL, 0, str(exc)) from exc
        if not resp.is_success:
            raise FetchError(API_URL, resp.status_code, resp.reason_phrase)

        items = resp.json().get("items") or []
        logger.debug("Search API returned %d item(s) for %r", len(items), query)
        return [
            {"title": item.get("title") or "", "url": item.get("link") or ""}
            for item in items
        ]
