"""Static HTML fetcher over ``httpx``."""

import logging

import httpx

from ..exceptions import FetchError
from ..models import RawPage
from .base import Fetcher

logger = logging.getLogger(__name__)


class HttpFetcher(Fetcher):
    """Plain GET with browser-like headers. Enough for song and artist pages."""

    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        wait_for: str | None = None,
        timeout: float | None = None,
    ) -> RawPage:
        logger.debug("GET %s", url)
        try:
            resp = httpx.get(
                url,
                headers=self.build_headers(headers),
                follow_redirects=True,
                timeout=timeout or self.settings.request_timeout,
            )
        except httpx.TimeoutException as exc:
            raise FetchError(url, 0, "request timed out") from exc
        except httpx.RequestError as exc:
            raise FetchError(url, 0, str(exc)) from exc
        if not resp.is_success:
            raise FetchError(url, resp.status_code, resp.reason_phrase)
        return RawPage(url=str(resp.url), html=resp.text, status_code=resp.status_code)
