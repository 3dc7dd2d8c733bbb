"""Render a URL in a browser Page and return the live HTML."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from pagecorpus.scraper.errors import NavigationError, NavigationTimeout

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000


def fetch_page(
    page: Page,
    url: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    wait_until: str = "domcontentloaded",
) -> str:
    """Navigate *page* to *url* and return ``page.content()``.

    The snapshot is taken after the *wait_until* condition is met, so it
    reflects script-driven changes rather than the raw response body.

    Raises:
        NavigationTimeout: The load-completion signal was not reached within
            *timeout_ms*.
        NavigationError: Any other navigation failure (DNS, TLS, crash, ...).
    """
    logger.info("→ Navigating: %s", url)
    try:
        page.goto(url, timeout=timeout_ms, wait_until=wait_until)
        return page.content()
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeout(url, timeout_ms) from exc
    except PlaywrightError as exc:
        raise NavigationError(url, str(exc)) from exc
