"""Exception taxonomy for the scraper pipeline.

Only :class:`SourceUnavailable` and :class:`BrowserStartupError` are fatal.
Navigation and extraction errors are recovered per URL by the orchestrator.
"""

from __future__ import annotations

from pathlib import Path


class ScraperError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(ScraperError, ValueError):
    """A settings value the pipeline cannot run with."""


class SourceUnavailable(ScraperError):
    """The URL list could not be opened."""

    def __init__(self, path: Path | str, reason: str = "") -> None:
        self.path = Path(path)
        message = f"URL source unavailable: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class BrowserStartupError(ScraperError):
    """Chromium could not be launched."""


class NavigationError(ScraperError):
    """Transport or rendering failure while loading a page."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class NavigationTimeout(NavigationError):
    """The load-completion signal was not reached in time."""

    def __init__(self, url: str, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(url, f"navigation timed out after {timeout_ms} ms")


class ExtractionFailure(ScraperError):
    """No usable article could be extracted from a rendered page."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(reason)
