"""Article extraction: turns rendered HTML into an :class:`Article`."""

from __future__ import annotations

import re

import trafilatura

from pagecorpus.scraper.models import Article


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    match = re.search(r"<title[^>]*>([^<]+)</title>", html, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return ""


def _bs4_fallback(html: str) -> str:
    """Extract readable text using BeautifulSoup ``<article>``/``<main>`` heuristics.

    Imported lazily; trafilatura handles the vast majority of pages.
    """
    from bs4 import BeautifulSoup  # noqa: PLC0415

    soup = BeautifulSoup(html, "html.parser")
    # Strip non-content elements
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header", "aside"]):
        tag.decompose()
    container = soup.find("article") or soup.find("main") or soup.body
    if container is None:
        return soup.get_text(separator=" ", strip=True)
    return container.get_text(separator=" ", strip=True)


def _metadata(html: str, url: str) -> tuple[str, str | None]:
    """Return ``(title, site_name)`` from trafilatura's metadata pass."""
    meta = trafilatura.extract_metadata(html, default_url=url)
    if meta is None:
        return "", None
    title = getattr(meta, "title", None) or ""
    site_name = getattr(meta, "sitename", None) or None
    return title, site_name


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_article(html: str, url: str) -> Article | None:
    """Extract the main article from rendered *html*.

    Tries ``trafilatura`` first for boilerplate removal and falls back to a
    BeautifulSoup heuristic when it finds nothing.  Returns ``None`` when
    neither produces any text.  No length threshold is applied here; the
    pipeline decides what counts as too short.
    """
    text: str | None = trafilatura.extract(
        html,
        url=url,
        include_comments=False,
        include_links=False,
        include_images=False,
        include_tables=True,
        no_fallback=False,
    )

    if not text:
        text = _bs4_fallback(html)
    if not text:
        return None

    title, site_name = _metadata(html, url)
    if not title:
        title = _extract_title(html)

    return Article(title=title, text_content=text, site_name=site_name)
