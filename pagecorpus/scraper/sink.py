"""Append-only JSONL output.

:class:`JsonlSink` writes one record per line and syncs after every record, so
a crash leaves only complete lines behind.  :class:`SinkWriter` puts a single
writer thread in front of a sink so several worker lanes can share one file.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Protocol

from pagecorpus.scraper.models import Record

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    def append(self, record: Record) -> None: ...


class JsonlSink:
    """Append records to a JSONL file, creating it (and its directory) on demand."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def append(self, record: Record) -> None:
        data = (record.to_json() + "\n").encode("utf-8")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Binary append mode: the whole line goes out in one write, never truncating.
        with self.path.open("ab") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())


_STOP = object()
_PUT_TIMEOUT = 0.5


class SinkWriter:
    """Serialise appends from many threads through one background writer.

    Usage::

        with SinkWriter(JsonlSink(path)) as writer:
            writer.append(record)  # safe from any thread
    """

    def __init__(self, sink: RecordSink, maxsize: int = 256) -> None:
        self._sink = sink
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._thread = threading.Thread(target=self._drain, name="sink-writer", daemon=True)
        self.written = 0
        self.failed = 0

    def __enter__(self) -> SinkWriter:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        self._thread.start()

    def append(self, record: Record) -> None:
        """Queue *record* for the writer thread.

        Raises ``RuntimeError`` once the writer has stopped instead of
        blocking on a full queue nobody drains.
        """
        while True:
            if not self._thread.is_alive():
                raise RuntimeError("SinkWriter is not running")
            try:
                self._queue.put(record, timeout=_PUT_TIMEOUT)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        """Flush everything queued so far and stop the writer thread."""
        if self._thread.is_alive():
            self._queue.put(_STOP)
            self._thread.join()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                self._sink.append(item)
                self.written += 1
            except Exception:
                # Keep draining; only this record is lost.
                self.failed += 1
                logger.exception("✗ Could not write record for %s", item.url)
