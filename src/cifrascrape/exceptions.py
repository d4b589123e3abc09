class CifraScrapeError(Exception):
    """Base exception for cifrascrape."""


class InvalidInputError(CifraScrapeError):
    """Raised when a URL or query is rejected before any network call."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid input {value!r}: {reason}")


class UnsupportedSiteError(InvalidInputError):
    """Raised when no adapter matches the given URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(url, "no adapter found for this site")


class FetchError(CifraScrapeError):
    """Raised when an HTTP request or a browser navigation fails.

    ``status_code`` is 0 for transport-level failures and timeouts.
    """

    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        msg = f"HTTP {status_code} fetching {url}" if status_code else f"Failed fetching {url}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ParseError(CifraScrapeError):
    """Raised when an embedded data island cannot be decoded.

    Never surfaced to callers; the extractor logs it and carries on.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Parse error in {source}: {reason}")
