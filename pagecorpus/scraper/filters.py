"""Pre-fetch URL classification.

Purely syntactic: nothing here touches the network, the point is to avoid
paying for a browser navigation on URLs that can never yield an article.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from pagecorpus.scraper.models import SkipReason

DEFAULT_MIN_URL_LENGTH = 5

# One optional trailing slash is tolerated (CDN-style ``/photo.jpg/``).
_IMAGE_RE = re.compile(r"\.(?:png|jpe?g|svg|gif)/?$", re.IGNORECASE)
_PDF_RE = re.compile(r"\.pdf/?$", re.IGNORECASE)


def classify_url(url: str, min_length: int = DEFAULT_MIN_URL_LENGTH) -> SkipReason:
    """Return why *url* should be skipped, or ``SkipReason.NONE`` to proceed."""
    if len(url) < min_length:
        return SkipReason.TOO_SHORT

    try:
        path = urlsplit(url).path
    except ValueError:
        # Malformed netloc (e.g. an unclosed IPv6 bracket); match the raw string.
        path = url
    if _IMAGE_RE.search(path):
        return SkipReason.IMAGE
    if _PDF_RE.search(path):
        return SkipReason.PDF
    return SkipReason.NONE
