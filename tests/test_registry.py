from unittest.mock import MagicMock

import pytest

from cifrascrape.adapters.cifraclub import CifraClubAdapter
from cifrascrape.config import Settings
from cifrascrape.exceptions import InvalidInputError, UnsupportedSiteError
from cifrascrape.registry import get_adapter


def test_get_adapter_for_cifraclub():
    adapter = get_adapter("https://www.cifraclub.com.br/tom-jobim/wave/", Settings())
    assert isinstance(adapter, CifraClubAdapter)


def test_get_adapter_passes_fetcher():
    fetcher = MagicMock()
    adapter = get_adapter("https://www.cifraclub.com.br/tom-jobim/", Settings(), fetcher=fetcher)
    assert adapter.fetcher is fetcher


def test_get_adapter_unsupported_site():
    with pytest.raises(UnsupportedSiteError) as excinfo:
        get_adapter("https://www.letras.mus.br/tom-jobim/", Settings())
    assert excinfo.value.url == "https://www.letras.mus.br/tom-jobim/"


def test_unsupported_site_is_invalid_input():
    with pytest.raises(InvalidInputError):
        get_adapter("https://example.com/", Settings())


def test_get_adapter_honours_configured_domain():
    config = Settings(site_domain="example.org", base_url="https://www.example.org")
    assert isinstance(get_adapter("https://www.example.org/x/", config), CifraClubAdapter)
