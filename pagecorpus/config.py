"""Centralised settings for the pagecorpus scraper.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).  Environment values are read
each time a :class:`ScraperSettings` is constructed, and malformed numbers
raise :class:`ConfigError`.  Callers pass an explicit instance through the
pipeline (use :func:`dataclasses.replace` for overrides).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from pagecorpus.scraper.errors import ConfigError

# Load .env from the project root (one level up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

WAIT_POLICIES = ("domcontentloaded", "networkidle")
PAGE_MODES = ("shared", "per-url")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Chromium flags tuned for 512MB-1GB hosts.
DEFAULT_BROWSER_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--single-process",
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer; got {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number; got {raw!r}") from None


def _env_path_or_none(name: str) -> Path | None:
    value = os.environ.get(name, "").strip()
    return Path(value) if value else None


@dataclass
class ScraperSettings:
    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------
    url_file: Path = field(
        default_factory=lambda: Path(os.environ.get("PAGECORPUS_URL_FILE", "url.list"))
    )
    output_file: Path = field(
        default_factory=lambda: Path(
            os.environ.get("PAGECORPUS_OUTPUT_FILE", "digital_marketing_corpus.jsonl")
        )
    )
    proxy_file: Path | None = field(
        default_factory=lambda: _env_path_or_none("PAGECORPUS_PROXY_FILE")
    )

    # ------------------------------------------------------------------
    # Browser
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("PAGECORPUS_USER_AGENT", DEFAULT_USER_AGENT)
    )
    viewport_width: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_VIEWPORT_WIDTH", "1366")
    )
    viewport_height: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_VIEWPORT_HEIGHT", "768")
    )
    headless: bool = field(
        default_factory=lambda: _env_bool("PAGECORPUS_HEADLESS", "true")
    )
    browser_args: tuple[str, ...] = DEFAULT_BROWSER_ARGS
    page_mode: str = field(
        default_factory=lambda: os.environ.get("PAGECORPUS_PAGE_MODE", "shared")
    )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    navigation_timeout_ms: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_NAVIGATION_TIMEOUT_MS", "30000")
    )
    # "domcontentloaded" is fast but can miss content injected by late XHR;
    # "networkidle" waits for quiescence and is noticeably slower.
    wait_until: str = field(
        default_factory=lambda: os.environ.get("PAGECORPUS_WAIT_UNTIL", "domcontentloaded")
    )

    # ------------------------------------------------------------------
    # Filtering / extraction
    # ------------------------------------------------------------------
    min_url_length: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_MIN_URL_LENGTH", "5")
    )
    min_article_chars: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_MIN_ARTICLE_CHARS", "200")
    )

    # ------------------------------------------------------------------
    # Pacing / scaling
    # ------------------------------------------------------------------
    delay_min: float = field(
        default_factory=lambda: _env_float("PAGECORPUS_DELAY_MIN", "0.2")
    )
    delay_max: float = field(
        default_factory=lambda: _env_float("PAGECORPUS_DELAY_MAX", "0.5")
    )
    lanes: int = field(
        default_factory=lambda: _env_int("PAGECORPUS_LANES", "1")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("PAGECORPUS_LOG_LEVEL", "INFO")
    )

    @property
    def viewport(self) -> dict[str, int]:
        """Viewport mapping in the shape Playwright's ``new_context`` expects."""
        return {"width": self.viewport_width, "height": self.viewport_height}

    def validate(self) -> "ScraperSettings":
        """Raise :class:`ConfigError` for values the pipeline cannot run with.

        Returns ``self`` so callers can chain ``replace(...).validate()``.
        """
        if self.wait_until not in WAIT_POLICIES:
            raise ConfigError(
                f"wait_until must be one of {', '.join(WAIT_POLICIES)}; got {self.wait_until!r}"
            )
        if self.page_mode not in PAGE_MODES:
            raise ConfigError(
                f"page_mode must be one of {', '.join(PAGE_MODES)}; got {self.page_mode!r}"
            )
        if self.lanes < 1:
            raise ConfigError(f"lanes must be at least 1; got {self.lanes}")
        if self.navigation_timeout_ms <= 0:
            raise ConfigError("navigation_timeout_ms must be positive")
        if self.delay_min < 0 or self.delay_max < self.delay_min:
            raise ConfigError(
                f"invalid delay window {self.delay_min}..{self.delay_max} seconds"
            )
        return self
