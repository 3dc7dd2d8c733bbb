"""Headless Chromium session owned by one pipeline lane.

A session is opened once per run and closed once at the end.  Pages are either
shared across every URL or opened and closed per URL, depending on
``settings.page_mode``; the resource gate is installed on each new Page either
way.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from pagecorpus.scraper.errors import BrowserStartupError
from pagecorpus.scraper.gate import install_resource_gate

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

    from pagecorpus.config import ScraperSettings

logger = logging.getLogger(__name__)


class BrowserSession:
    """Context manager around a Playwright driver, browser and context.

    Usage::

        with BrowserSession(config, proxy="http://10.0.0.1:3128") as session:
            with session.page() as page:
                page.goto(url)
    """

    def __init__(self, config: ScraperSettings, proxy: str | None = None) -> None:
        self.config = config
        self.proxy = proxy
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._shared_page: Page | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def launch_options(self) -> dict[str, Any]:
        """Keyword arguments for ``chromium.launch``; ``proxy`` only when set."""
        options: dict[str, Any] = {
            "headless": self.config.headless,
            "args": list(self.config.browser_args),
        }
        if self.proxy:
            options["proxy"] = {"server": self.proxy}
        return options

    def __enter__(self) -> BrowserSession:
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(**self.launch_options())
            self._context = self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport=self.config.viewport,
                # Service workers would fetch outside page.route and skip the gate.
                service_workers="block",
            )
            if self.config.page_mode == "shared":
                self._shared_page = self._new_page()
        except PlaywrightError as exc:
            self.close()
            raise BrowserStartupError(f"could not start Chromium: {exc}") from exc

        if self.proxy:
            logger.info("Browser started via proxy %s", self.proxy)
        else:
            logger.info("Browser started (direct connection)")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the context, browser and driver, in that order.  Idempotent."""
        if self._context is not None:
            self._context.close()
            self._context = None
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None
        self._shared_page = None

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------
    def _new_page(self) -> Page:
        if self._context is None:
            raise RuntimeError("BrowserSession is not open")
        page = self._context.new_page()
        install_resource_gate(page)
        return page

    @contextmanager
    def page(self) -> Iterator[Page]:
        """Yield the Page to use for the next URL.

        In ``shared`` mode this is always the same Page.  In ``per-url`` mode
        a fresh Page is created and closed again once the caller is done.
        """
        if self._shared_page is not None:
            yield self._shared_page
            return

        page = self._new_page()
        try:
            yield page
        finally:
            page.close()
