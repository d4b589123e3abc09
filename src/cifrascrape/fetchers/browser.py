"""Headless-browser fetcher for pages rendered client-side.

The site's search results are injected by a JavaScript widget, so the
static HTML holds nothing useful.  A single Chromium process is shared by
the whole process and driven from one worker thread, because Playwright's
sync API is bound to the thread that started it.  Each fetch gets its own
browser context and page, closed again however the fetch ends.
"""

import atexit
import logging
import queue
import threading
from concurrent.futures import Future

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..config import Settings
from ..exceptions import FetchError
from ..models import RawPage
from .base import Fetcher

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

# Resource types never needed to read the DOM.
_BLOCKED_RESOURCES = {"image", "stylesheet", "font", "media"}


def _block_heavy_resources(route) -> None:
    if route.request.resource_type in _BLOCKED_RESOURCES:
        route.abort()
    else:
        route.continue_()


class BrowserManager:
    """Owns the process-wide Chromium instance.

    The browser is launched on first use, relaunched if it has disconnected,
    and closed by :meth:`shutdown`, which is also registered with
    :mod:`atexit`.  The worker is a daemon thread fed from a queue, so it is
    still running when ``atexit`` handlers are called.
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._lock = threading.Lock()
        self._jobs: queue.Queue | None = None
        self._thread: threading.Thread | None = None
        self._playwright = None
        self._browser = None

    def _worker(self) -> queue.Queue:
        with self._lock:
            if self._thread is None:
                self._jobs = queue.Queue()
                self._thread = threading.Thread(
                    target=self._serve, args=(self._jobs,), name="browser", daemon=True
                )
                self._thread.start()
                atexit.register(self.shutdown)
            return self._jobs

    @staticmethod
    def _serve(jobs: queue.Queue) -> None:
        while True:
            job = jobs.get()
            if job is None:
                return
            fn, args, future = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args))
            except Exception as exc:
                future.set_exception(exc)

    @staticmethod
    def _submit(jobs: queue.Queue, fn, *args) -> Future:
        future = Future()
        jobs.put((fn, args, future))
        return future

    def _ensure_browser(self):
        # Worker thread only.
        if self._browser is not None and not self._browser.is_connected():
            logger.warning("Chromium disconnected, relaunching")
            self._browser = None
        if self._browser is None:
            if self._playwright is None:
                self._playwright = sync_playwright().start()
            logger.info("Launching headless Chromium")
            self._browser = self._playwright.chromium.launch(
                headless=self.headless, args=_LAUNCH_ARGS
            )
        return self._browser

    def run(self, fn, headers: dict[str, str] | None = None):
        """Call ``fn(page)`` with a fresh page and return its result.

        Exceptions raised by *fn* (or by the browser) propagate to the caller.
        """
        return self._submit(self._worker(), self._run_in_page, fn, headers or {}).result()

    def _run_in_page(self, fn, headers: dict[str, str]):
        browser = self._ensure_browser()
        extra = {k: v for k, v in headers.items() if k.lower() != "user-agent"}
        context = browser.new_context(
            user_agent=headers.get("User-Agent"),
            extra_http_headers=extra,
            locale="pt-BR",
        )
        try:
            page = context.new_page()
            page.route("**/*", _block_heavy_resources)
            return fn(page)
        finally:
            context.close()

    def shutdown(self) -> None:
        """Close the browser and stop the worker thread. Safe to call twice."""
        with self._lock:
            thread, jobs = self._thread, self._jobs
            self._thread = self._jobs = None
        if thread is None:
            return
        closed = self._submit(jobs, self._close_browser)
        jobs.put(None)
        try:
            closed.result()
        finally:
            thread.join()

    def _close_browser(self) -> None:
        if self._browser is not None:
            logger.info("Closing headless Chromium")
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None


_shared_manager: BrowserManager | None = None
_shared_lock = threading.Lock()


def get_browser_manager() -> BrowserManager:
    """Return the process-wide :class:`BrowserManager`, creating it lazily."""
    global _shared_manager
    with _shared_lock:
        if _shared_manager is None:
            _shared_manager = BrowserManager()
        return _shared_manager


class BrowserFetcher(Fetcher):
    """Render the page in headless Chromium and return the resulting DOM."""

    def __init__(self, settings: Settings | None = None, manager: BrowserManager | None = None):
        super().__init__(settings)
        self._manager = manager

    @property
    def manager(self) -> BrowserManager:
        if self._manager is None:
            self._manager = get_browser_manager()
        return self._manager

    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        wait_for: str | None = None,
        timeout: float | None = None,
    ) -> RawPage:
        nav_timeout_ms = int((timeout or self.settings.request_timeout) * 1000)
        wait_timeout_ms = int(self.settings.wait_timeout * 1000)

        def load(page) -> RawPage:
            logger.debug("Navigating to %s", url)
            response = page.goto(url, wait_until="domcontentloaded", timeout=nav_timeout_ms)
            status = response.status if response is not None else 200
            if response is not None and not response.ok:
                raise FetchError(url, status, response.status_text)
            if wait_for:
                try:
                    page.wait_for_selector(wait_for, timeout=wait_timeout_ms)
                except PlaywrightTimeoutError as exc:
                    raise FetchError(url, 0, f"timed out waiting for {wait_for}") from exc
            return RawPage(url=url, html=page.content(), status_code=status)

        try:
            return self.manager.run(load, self.build_headers(headers))
        except PlaywrightTimeoutError as exc:
            raise FetchError(url, 0, "navigation timed out") from exc
        except PlaywrightError as exc:
            raise FetchError(url, 0, str(exc)) from exc
