from cifrascrape.config import Settings


def test_defaults(monkeypatch):
    for var in ("CIFRA_BASE_URL", "CIFRA_SEARCH_LIMIT", "CIFRA_API_SEARCH_LIMIT", "CIFRA_CACHE_TTL",
                "CIFRA_ACCEPT_LANGUAGE", "GOOGLE_API_KEY", "GOOGLE_CSE_ID"):
        monkeypatch.delenv(var, raising=False)
    config = Settings()
    assert config.base_url == "https://www.cifraclub.com.br"
    assert config.site_domain == "cifraclub.com.br"
    assert config.brand == "Cifra Club"
    assert config.accept_language.startswith("pt-BR")
    assert config.search_limit == 5
    assert config.api_search_limit == 10
    assert config.cache_ttl == 3600.0
    assert config.search_api_enabled is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CIFRA_SEARCH_LIMIT", "3")
    monkeypatch.setenv("CIFRA_WAIT_TIMEOUT", "2.5")
    monkeypatch.setenv("GOOGLE_API_KEY", "k")
    monkeypatch.setenv("GOOGLE_CSE_ID", "c")
    config = Settings()
    assert config.search_limit == 3
    assert config.wait_timeout == 2.5
    assert config.search_api_enabled is True


def test_search_url():
    assert Settings(base_url="https://www.cifraclub.com.br").search_url == "https://www.cifraclub.com.br/"
    assert Settings(base_url="https://m.cifraclub.com.br/").search_url == "https://m.cifraclub.com.br/"
