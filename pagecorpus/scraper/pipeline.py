"""Crawl-and-extract orchestrator.

``ScrapePipeline.run`` drives one browser session over a stream of URLs:

    filter → fetch → extract → normalize → persist → pace

Each URL ends in exactly one terminal :class:`UrlState`.  Per-URL failures are
logged and never stop the run; only a source or browser-startup failure is
fatal.  URLs are processed strictly one at a time against the session's Page.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import TYPE_CHECKING, Callable, ContextManager, Iterable, Sequence

from pagecorpus.scraper.browser import BrowserSession
from pagecorpus.scraper.errors import ExtractionFailure, NavigationError, NavigationTimeout
from pagecorpus.scraper.extractor import extract_article
from pagecorpus.scraper.fetcher import fetch_page
from pagecorpus.scraper.filters import classify_url
from pagecorpus.scraper.models import Article, RunStats, SkipReason, UrlState
from pagecorpus.scraper.normalizer import normalize
from pagecorpus.scraper.pacer import Pacer
from pagecorpus.scraper.proxies import select_proxy
from pagecorpus.scraper.sink import RecordSink

if TYPE_CHECKING:
    from pagecorpus.config import ScraperSettings

logger = logging.getLogger(__name__)

Fetcher = Callable[..., str]
Extractor = Callable[[str, str], "Article | None"]
SessionFactory = Callable[..., ContextManager]


class ScrapePipeline:
    """Run the per-URL state machine for one worker lane.

    Args:
        config: Explicit settings for this run.
        sink: Where persisted records go (:class:`JsonlSink` or
            :class:`SinkWriter`).
        proxies: Candidate proxy endpoints; one is picked when the session
            starts.  Empty means a direct connection.
        session_factory: ``factory(config, proxy=...)`` returning a context
            manager whose value exposes ``page()``.
        fetcher: ``fetcher(page, url, timeout_ms=..., wait_until=...) -> html``.
        extractor: ``extractor(html, url) -> Article | None``.
        pacer: Inter-URL delay; built from ``config`` when omitted.
        stop_event: Checked between URLs; once set, the run ends cleanly.
        lane: Worker lane index, only used to label log lines.
    """

    def __init__(
        self,
        config: ScraperSettings,
        *,
        sink: RecordSink,
        proxies: Sequence[str] = (),
        session_factory: SessionFactory = BrowserSession,
        fetcher: Fetcher = fetch_page,
        extractor: Extractor = extract_article,
        pacer: Pacer | None = None,
        stop_event: threading.Event | None = None,
        rng: random.Random | None = None,
        lane: int = 0,
    ) -> None:
        self.config = config
        self.sink = sink
        self.proxies = list(proxies)
        self._session_factory = session_factory
        self._fetch = fetcher
        self._extract = extractor
        self.pacer = pacer or Pacer(config.delay_min, config.delay_max)
        self.stop_event = stop_event or threading.Event()
        self._rng = rng
        self.lane = lane

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------
    def run(self, urls: Iterable[str]) -> RunStats:
        """Process every URL in *urls* with one browser session.

        Raises:
            BrowserStartupError: Chromium could not be launched.
        """
        stats = RunStats()
        proxy = select_proxy(self.proxies, self._rng)

        logger.info("Starting scraper (lane %d)", self.lane)
        with self._session_factory(self.config, proxy=proxy) as session:
            for url in urls:
                if self.stop_event.is_set():
                    logger.info("Stop requested; lane %d exiting before %s", self.lane, url)
                    break
                stats.record(self.process_url(session, url))
                self.pacer.wait()

        logger.info("✔ Scraping finished (lane %d): %s", self.lane, stats.summary())
        return stats

    # ------------------------------------------------------------------
    # Per-URL state machine
    # ------------------------------------------------------------------
    def process_url(self, session, url: str) -> UrlState:
        """Take *url* from ``pending`` to a terminal state.  Never raises."""
        try:
            return self._process(session, url)
        except Exception:
            logger.exception("✗ Unexpected error for %s", url)
            return UrlState.FAILED

    def _process(self, session, url: str) -> UrlState:
        reason = classify_url(url, self.config.min_url_length)
        if reason is not SkipReason.NONE:
            logger.info("↷ Skipped (%s): %s", reason.value, url)
            return UrlState.FILTERED

        try:
            with session.page() as page:
                html = self._fetch(
                    page,
                    url,
                    timeout_ms=self.config.navigation_timeout_ms,
                    wait_until=self.config.wait_until,
                )
        except NavigationTimeout as exc:
            logger.warning("✗ Timed out %s: %s", url, exc)
            return UrlState.FETCH_FAILED
        except NavigationError as exc:
            logger.warning("✗ Failed %s: %s", url, exc)
            return UrlState.FETCH_FAILED
        except Exception as exc:
            logger.warning("✗ Failed %s: %r", url, exc)
            return UrlState.FETCH_FAILED

        try:
            article = self._usable_article(html, url)
        except ExtractionFailure as exc:
            logger.info("✗ %s: %s", exc.reason, url)
            return UrlState.EXTRACT_FAILED

        record = normalize(article, url)
        self.sink.append(record)
        logger.info("✓ Saved: %s", record.title or url)
        return UrlState.PERSISTED

    def _usable_article(self, html: str, url: str) -> Article:
        """Run the extractor and enforce the minimum text length.

        A missing article and a too-short one are the same failure here.
        """
        try:
            article = self._extract(html, url)
        except Exception as exc:
            raise ExtractionFailure(url, f"Extraction error ({exc!r})") from exc
        if article is None or len(article.text_content) < self.config.min_article_chars:
            raise ExtractionFailure(url, "Too short")
        return article
