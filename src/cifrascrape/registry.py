from .adapters.base import SiteAdapter
from .adapters.cifraclub import CifraClubAdapter
from .config import Settings
from .exceptions import UnsupportedSiteError

_ADAPTERS: list[type[SiteAdapter]] = [
    CifraClubAdapter,
]


def get_adapter(url: str, settings: Settings | None = None, **kwargs) -> SiteAdapter:
    """Return an instantiated adapter for the given URL.

    Extra keyword arguments (e.g. ``fetcher``) are passed to the adapter.
    Raises UnsupportedSiteError if no adapter matches.
    """
    for cls in _ADAPTERS:
        if cls.can_handle(url, settings):
            return cls(settings=settings, **kwargs)
    raise UnsupportedSiteError(url)
