"""Map an extracted :class:`Article` onto the persisted :class:`Record` shape."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from pagecorpus.scraper.models import Article, Record

_WHITESPACE_RUN = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run (newlines and tabs included) with one space and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize(article: Article, url: str, now: datetime | None = None) -> Record:
    """Build the record for *url*.

    ``site_name`` is passed through as-is, ``None`` included; it is never
    derived from the URL host.
    """
    return Record(
        url=url,
        title=article.title or "",
        content=collapse_whitespace(article.text_content),
        site_name=article.site_name,
        scraped_at=utc_timestamp(now),
    )
