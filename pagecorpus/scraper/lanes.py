"""Entry point for a full run, optionally spread over parallel worker lanes.

Each lane owns its own browser session (with an independently chosen proxy)
and the round-robin slice of the URL list given by
:func:`~pagecorpus.scraper.source.partition`.  With more than one lane, all
records funnel through a single :class:`~pagecorpus.scraper.sink.SinkWriter`
thread so writes to the shared output file never interleave.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Any

from pagecorpus.scraper.errors import BrowserStartupError
from pagecorpus.scraper.models import RunStats
from pagecorpus.scraper.pipeline import ScrapePipeline
from pagecorpus.scraper.proxies import load_proxies
from pagecorpus.scraper.sink import JsonlSink, RecordSink, SinkWriter
from pagecorpus.scraper.source import ensure_source, open_url_source, partition

if TYPE_CHECKING:
    from pagecorpus.config import ScraperSettings

logger = logging.getLogger(__name__)


def _run_lane(
    config: ScraperSettings,
    lane: int,
    lanes: int,
    sink: RecordSink,
    proxies: list[str],
    stop_event: threading.Event,
    pipeline_kwargs: dict[str, Any],
) -> RunStats:
    pipeline = ScrapePipeline(
        config,
        sink=sink,
        proxies=proxies,
        stop_event=stop_event,
        lane=lane,
        **pipeline_kwargs,
    )
    with open_url_source(config.url_file) as urls:
        return pipeline.run(partition(urls, lane, lanes))


def run_lanes(
    config: ScraperSettings,
    *,
    lanes: int | None = None,
    stop_event: threading.Event | None = None,
    **pipeline_kwargs: Any,
) -> RunStats:
    """Scrape every URL in ``config.url_file`` into ``config.output_file``.

    Args:
        config: Run settings.
        lanes: Number of parallel lanes; defaults to ``config.lanes``.
        stop_event: Cooperative stop signal shared by all lanes.
        **pipeline_kwargs: Forwarded to :class:`ScrapePipeline`
            (``session_factory``, ``fetcher``, ``extractor``, ``pacer``).

    Returns:
        Terminal-state counts merged across lanes.

    Raises:
        SourceUnavailable: The URL list cannot be opened.  Raised before any
            browser is started.
        BrowserStartupError: A lane could not launch Chromium.
    """
    lanes = lanes or config.lanes
    stop_event = stop_event or threading.Event()

    ensure_source(config.url_file)
    proxies = load_proxies(config.proxy_file)
    sink = JsonlSink(config.output_file)

    if lanes == 1:
        return _run_lane(config, 0, 1, sink, proxies, stop_event, pipeline_kwargs)

    logger.info("Running %d lanes against %s", lanes, config.url_file)
    total = RunStats()
    startup_error: BrowserStartupError | None = None

    with SinkWriter(sink) as writer:
        with ThreadPoolExecutor(max_workers=lanes, thread_name_prefix="lane") as pool:
            future_to_lane = {
                pool.submit(
                    _run_lane, config, lane, lanes, writer, proxies, stop_event, pipeline_kwargs
                ): lane
                for lane in range(lanes)
            }
            for future in as_completed(future_to_lane):
                lane = future_to_lane[future]
                try:
                    total.merge(future.result())
                except BrowserStartupError as exc:
                    logger.error("✗ Lane %d could not start: %s", lane, exc)
                    startup_error = startup_error or exc

    if startup_error is not None:
        raise startup_error
    logger.info("✔ All lanes finished: %s", total.summary())
    return total
