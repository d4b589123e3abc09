"""Centralised settings for cifrascrape.

Every value can be overridden with an environment variable or a ``.env``
file in the working directory (loaded when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path.cwd() / ".env", override=False)

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Target site
    # ------------------------------------------------------------------
    base_url: str = field(
        default_factory=lambda: os.environ.get("CIFRA_BASE_URL", "https://www.cifraclub.com.br")
    )
    site_domain: str = field(
        default_factory=lambda: os.environ.get("CIFRA_SITE_DOMAIN", "cifraclub.com.br")
    )
    brand: str = field(default_factory=lambda: os.environ.get("CIFRA_BRAND", "Cifra Club"))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("CIFRA_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    accept_language: str = field(
        default_factory=lambda: os.environ.get(
            "CIFRA_ACCEPT_LANGUAGE", "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"
        )
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CIFRA_REQUEST_TIMEOUT", "15.0"))
    )
    wait_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CIFRA_WAIT_TIMEOUT", "10.0"))
    )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    search_limit: int = field(
        default_factory=lambda: int(os.environ.get("CIFRA_SEARCH_LIMIT", "5"))
    )
    api_search_limit: int = field(
        default_factory=lambda: int(os.environ.get("CIFRA_API_SEARCH_LIMIT", "10"))
    )
    google_api_key: str = field(default_factory=lambda: os.environ.get("GOOGLE_API_KEY", ""))
    google_cse_id: str = field(default_factory=lambda: os.environ.get("GOOGLE_CSE_ID", ""))

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("CIFRA_CACHE_TTL", "3600"))
    )
    cache_path: str = field(default_factory=lambda: os.environ.get("CIFRA_CACHE_PATH", ""))

    @property
    def search_api_enabled(self) -> bool:
        """True when credentials for the structured search API are configured."""
        return bool(self.google_api_key and self.google_cse_id)

    @property
    def search_url(self) -> str:
        return self.base_url.rstrip("/") + "/"


# Module-level singleton:
#   from cifrascrape.config import settings
settings = Settings()
