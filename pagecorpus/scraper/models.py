"""Data models for the scraper pipeline."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class SkipReason(str, Enum):
    """Syntactic classification of a candidate URL."""

    IMAGE = "image"
    PDF = "pdf"
    TOO_SHORT = "too-short"
    NONE = "none"


class UrlState(str, Enum):
    """Per-URL pipeline states.  Only the terminal ones are ever returned."""

    PENDING = "pending"
    FILTERED = "filtered"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch-failed"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    EXTRACT_FAILED = "extract-failed"
    NORMALIZED = "normalized"
    PERSISTED = "persisted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        UrlState.FILTERED,
        UrlState.FETCH_FAILED,
        UrlState.EXTRACT_FAILED,
        UrlState.PERSISTED,
        UrlState.FAILED,
    }
)


@dataclass
class Article:
    """Output of the extraction step for one rendered page."""

    title: str
    text_content: str
    site_name: str | None = None


@dataclass(frozen=True)
class Record:
    """One persisted JSONL line.  Field order is the on-disk key order."""

    url: str
    title: str
    content: str
    site_name: str | None
    scraped_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        """Serialise to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass
class RunStats:
    """Terminal-state counters for one pipeline run (or several merged lanes)."""

    counts: Counter = field(default_factory=Counter)

    def record(self, state: UrlState) -> None:
        self.counts[state] += 1

    def merge(self, other: RunStats) -> RunStats:
        self.counts.update(other.counts)
        return self

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def persisted(self) -> int:
        return self.counts[UrlState.PERSISTED]

    def summary(self) -> str:
        """Return a compact ``state=count`` summary, e.g. for the final log line."""
        parts = [f"{state.value}={self.counts[state]}" for state in _SUMMARY_ORDER]
        return " ".join(parts)


_SUMMARY_ORDER = (
    UrlState.PERSISTED,
    UrlState.FILTERED,
    UrlState.FETCH_FAILED,
    UrlState.EXTRACT_FAILED,
    UrlState.FAILED,
)
