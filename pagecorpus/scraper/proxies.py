"""Optional proxy list, sampled once per browser session."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Sequence

from pagecorpus.scraper.source import iter_lines

logger = logging.getLogger(__name__)


def load_proxies(path: Path | str | None) -> list[str]:
    """Return the proxy endpoints listed in *path*, one per non-blank line.

    A missing file (or no path at all) means direct connections and yields an
    empty list.
    """
    if path is None:
        return []
    proxy_path = Path(path)
    if not proxy_path.is_file():
        logger.info("No proxy file at %s; using direct connections", proxy_path)
        return []
    with proxy_path.open(encoding="utf-8") as handle:
        proxies = list(iter_lines(handle))
    logger.info("Loaded %d proxy endpoint(s) from %s", len(proxies), proxy_path)
    return proxies


def select_proxy(
    proxies: Sequence[str], rng: random.Random | None = None
) -> str | None:
    """Pick one endpoint uniformly at random, or ``None`` if the list is empty."""
    if not proxies:
        return None
    return (rng or random).choice(proxies)
