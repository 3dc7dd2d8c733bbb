"""Streaming URL source: one candidate URL per non-blank line."""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator

from pagecorpus.scraper.errors import SourceUnavailable


def _open(path: Path | str) -> IO[str]:
    try:
        return open(path, encoding="utf-8")
    except OSError as exc:
        raise SourceUnavailable(path, exc.strerror or str(exc)) from exc


def iter_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield each line trimmed, skipping blank ones."""
    for line in lines:
        candidate = line.strip()
        if candidate:
            yield candidate


@contextmanager
def open_url_source(path: Path | str) -> Iterator[Iterator[str]]:
    """Open *path* and yield a lazy iterator of candidate URLs in file order.

    The file is opened eagerly, so a missing or unreadable list raises
    :class:`SourceUnavailable` on entry rather than on first iteration.
    Lines are read one at a time; nothing is materialised.
    """
    handle = _open(path)
    with handle:
        yield iter_lines(handle)


def ensure_source(path: Path | str) -> None:
    """Raise :class:`SourceUnavailable` unless *path* can be opened for reading."""
    _open(path).close()


def partition(urls: Iterable[str], lane: int, lanes: int) -> Iterator[str]:
    """Return the round-robin slice of *urls* owned by worker *lane*.

    Slices for ``lane in range(lanes)`` are disjoint and together cover the
    whole stream.
    """
    if not 0 <= lane < lanes:
        raise ValueError(f"lane {lane} out of range for {lanes} lane(s)")
    return itertools.islice(urls, lane, None, lanes)
