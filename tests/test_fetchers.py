"""Tests for the fetch strategies.

``respx`` patches ``httpx`` at the transport layer, so no real network calls
are made.  Playwright is never launched: the browser fetcher is driven
through fake pages, and the manager through a fake browser object.
"""

import os
import subprocess
import sys
import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import respx
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from cifrascrape.config import Settings
from cifrascrape.exceptions import FetchError
from cifrascrape.fetchers.base import default_headers
from cifrascrape.fetchers.browser import BrowserFetcher, BrowserManager, _block_heavy_resources
from cifrascrape.fetchers.http import HttpFetcher

SONG_URL = "https://www.cifraclub.com.br/tom-jobim/wave/"
HTML = "<html><pre><b>G</b></pre></html>"
SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def make_settings(**overrides) -> Settings:
    values = {"request_timeout": 5.0, "wait_timeout": 2.0}
    values.update(overrides)
    return Settings(**values)


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


def test_default_headers_look_like_a_browser():
    headers = default_headers(make_settings())
    assert headers["User-Agent"].startswith("Mozilla/5.0")
    assert headers["Accept-Language"].startswith("pt-BR")
    assert "text/html" in headers["Accept"]


def test_call_headers_override_defaults():
    fetcher = HttpFetcher(make_settings())
    headers = fetcher.build_headers({"Accept-Language": "en"})
    assert headers["Accept-Language"] == "en"
    assert headers["User-Agent"].startswith("Mozilla/5.0")


# ---------------------------------------------------------------------------
# HttpFetcher
# ---------------------------------------------------------------------------


@respx.mock
def test_http_fetch_returns_raw_page():
    route = respx.get(SONG_URL).mock(return_value=httpx.Response(200, text=HTML))
    page = HttpFetcher(make_settings()).fetch(SONG_URL)
    assert page.html == HTML
    assert page.status_code == 200
    assert page.url == SONG_URL
    sent = route.calls.last.request
    assert sent.headers["Accept-Language"].startswith("pt-BR")
    assert sent.headers["User-Agent"].startswith("Mozilla/5.0")


@respx.mock
def test_http_fetch_non_2xx_raises_fetch_error():
    respx.get(SONG_URL).mock(return_value=httpx.Response(404))
    with pytest.raises(FetchError) as excinfo:
        HttpFetcher(make_settings()).fetch(SONG_URL)
    assert excinfo.value.status_code == 404
    assert excinfo.value.url == SONG_URL


@respx.mock
def test_http_fetch_timeout_raises_fetch_error():
    respx.get(SONG_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
    with pytest.raises(FetchError) as excinfo:
        HttpFetcher(make_settings()).fetch(SONG_URL)
    assert excinfo.value.status_code == 0
    assert "timed out" in excinfo.value.reason


@respx.mock
def test_http_fetch_connection_error_raises_fetch_error():
    respx.get(SONG_URL).mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(FetchError) as excinfo:
        HttpFetcher(make_settings()).fetch(SONG_URL)
    assert excinfo.value.status_code == 0


@respx.mock
def test_http_fetch_ignores_wait_for():
    respx.get(SONG_URL).mock(return_value=httpx.Response(200, text=HTML))
    page = HttpFetcher(make_settings()).fetch(SONG_URL, wait_for="a.gs-title")
    assert page.html == HTML


@respx.mock
def test_http_fetch_explicit_timeout_overrides_setting():
    route = respx.get(SONG_URL).mock(return_value=httpx.Response(200, text=HTML))
    HttpFetcher(make_settings()).fetch(SONG_URL, timeout=1.5)
    timeouts = route.calls.last.request.extensions["timeout"]
    assert timeouts["read"] == 1.5


# ---------------------------------------------------------------------------
# BrowserFetcher
# ---------------------------------------------------------------------------


class FakeManager:
    """Stands in for BrowserManager: runs the callback on a fake page."""

    def __init__(self, page):
        self.page = page
        self.headers = None

    def run(self, fn, headers=None):
        self.headers = headers
        return fn(self.page)


def fake_page(status=200, ok=True, html=HTML):
    page = MagicMock()
    response = MagicMock(status=status, ok=ok, status_text="Forbidden" if not ok else "OK")
    page.goto.return_value = response
    page.content.return_value = html
    return page


def test_browser_fetch_returns_rendered_html():
    page = fake_page()
    manager = FakeManager(page)
    raw = BrowserFetcher(make_settings(), manager=manager).fetch(SONG_URL)
    assert raw.html == HTML
    assert raw.status_code == 200
    page.goto.assert_called_once_with(SONG_URL, wait_until="domcontentloaded", timeout=5000)
    page.wait_for_selector.assert_not_called()
    assert manager.headers["Accept-Language"].startswith("pt-BR")


def test_browser_fetch_waits_for_selector():
    page = fake_page()
    BrowserFetcher(make_settings(), manager=FakeManager(page)).fetch(SONG_URL, wait_for="a.gs-title")
    page.wait_for_selector.assert_called_once_with("a.gs-title", timeout=2000)


def test_browser_fetch_selector_timeout_raises_fetch_error():
    page = fake_page()
    page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 2000ms exceeded")
    fetcher = BrowserFetcher(make_settings(), manager=FakeManager(page))
    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch(SONG_URL, wait_for="a.gs-title")
    assert "a.gs-title" in excinfo.value.reason


def test_browser_fetch_navigation_timeout_raises_fetch_error():
    page = fake_page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")
    with pytest.raises(FetchError) as excinfo:
        BrowserFetcher(make_settings(), manager=FakeManager(page)).fetch(SONG_URL)
    assert excinfo.value.status_code == 0


def test_browser_fetch_error_status_raises_fetch_error():
    page = fake_page(status=403, ok=False)
    with pytest.raises(FetchError) as excinfo:
        BrowserFetcher(make_settings(), manager=FakeManager(page)).fetch(SONG_URL)
    assert excinfo.value.status_code == 403
    page.content.assert_not_called()


def test_browser_fetch_explicit_timeout_overrides_setting():
    page = fake_page()
    BrowserFetcher(make_settings(), manager=FakeManager(page)).fetch(SONG_URL, timeout=1.5)
    page.goto.assert_called_once_with(SONG_URL, wait_until="domcontentloaded", timeout=1500)


# ---------------------------------------------------------------------------
# BrowserManager
# ---------------------------------------------------------------------------


@pytest.fixture
def manager():
    mgr = BrowserManager()
    browser = MagicMock()
    mgr._browser = browser  # skip the real launch
    yield mgr
    mgr._browser = None
    mgr.shutdown()


def test_manager_runs_callback_on_fresh_page(manager):
    context = manager._browser.new_context.return_value
    result = manager.run(lambda page: ("seen", page), {"User-Agent": "UA", "Accept": "text/html"})
    assert result == ("seen", context.new_page.return_value)
    manager._browser.new_context.assert_called_once_with(
        user_agent="UA", extra_http_headers={"Accept": "text/html"}, locale="pt-BR"
    )
    context.close.assert_called_once()


def test_manager_closes_context_when_callback_fails(manager):
    context = manager._browser.new_context.return_value

    def boom(page):
        raise RuntimeError("extraction failed")

    with pytest.raises(RuntimeError):
        manager.run(boom)
    context.close.assert_called_once()


def test_manager_each_run_gets_its_own_context(manager):
    manager.run(lambda page: None)
    manager.run(lambda page: None)
    assert manager._browser.new_context.call_count == 2
    assert manager._browser.new_context.return_value.close.call_count == 2


def test_manager_blocks_heavy_resources(manager):
    manager.run(lambda page: None)
    page = manager._browser.new_context.return_value.new_page.return_value
    page.route.assert_called_once_with("**/*", _block_heavy_resources)


def test_manager_shutdown_closes_browser():
    mgr = BrowserManager()
    browser = MagicMock()
    playwright = MagicMock()
    mgr._browser = browser
    mgr._playwright = playwright
    mgr.run(lambda page: None)
    mgr.shutdown()
    browser.close.assert_called_once()
    playwright.stop.assert_called_once()
    mgr.shutdown()  # second call is a no-op
    browser.close.assert_called_once()


def test_manager_relaunches_disconnected_browser():
    mgr = BrowserManager()
    dead = MagicMock()
    dead.is_connected.return_value = False
    playwright = MagicMock()
    fresh = playwright.chromium.launch.return_value
    mgr._browser = dead
    mgr._playwright = playwright
    try:
        mgr.run(lambda page: None)
        assert mgr._browser is fresh
    finally:
        mgr.shutdown()
    playwright.chromium.launch.assert_called_once()
    dead.new_context.assert_not_called()
    fresh.new_context.assert_called_once()


def test_manager_keeps_connected_browser(manager):
    browser = manager._browser
    browser.is_connected.return_value = True
    manager.run(lambda page: None)
    manager.run(lambda page: None)
    assert manager._browser is browser


def test_manager_run_after_shutdown_starts_new_worker():
    mgr = BrowserManager()
    mgr._browser = MagicMock()
    mgr.run(lambda page: None)
    mgr.shutdown()
    mgr._browser = MagicMock()
    try:
        assert mgr.run(lambda page: "again") == "again"
    finally:
        mgr.shutdown()


def test_manager_closes_browser_at_interpreter_exit(tmp_path):
    marker = tmp_path / "closed"
    script = textwrap.dedent(f"""
        from pathlib import Path
        from unittest.mock import MagicMock

        from cifrascrape.fetchers.browser import BrowserManager

        browser = MagicMock()
        browser.close.side_effect = lambda: Path({str(marker)!r}).write_text("closed")
        mgr = BrowserManager()
        mgr._browser = browser
        mgr._playwright = MagicMock()
        mgr.run(lambda page: None)
    """)
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    proc = subprocess.run(
        [sys.executable, "-c", script], env=env, capture_output=True, text=True, timeout=60
    )
    assert proc.returncode == 0, proc.stderr
    assert marker.read_text() == "closed"
    assert "Traceback" not in proc.stderr


@pytest.mark.parametrize("resource_type, aborted", [("image", True), ("font", True), ("document", False), ("script", False)])
def test_block_heavy_resources(resource_type, aborted):
    route = MagicMock()
    route.request.resource_type = resource_type
    _block_heavy_resources(route)
    assert route.abort.called is aborted
    assert route.continue_.called is not aborted
