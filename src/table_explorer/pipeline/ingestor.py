"""Background ingestion of a psql-style text stream.

The header and separator are read synchronously; a dedicated thread then
parses the remainder line by line and hands rows to the UI in batches through
a queue. The UI drains without ever blocking.

Cross-thread state is limited to:
    - the batch queue (producer → consumer, FIFO)
    - the parsed-row counter (written by the producer only)
    - the cancel event (set by the consumer only)
    - the completion event (set by the producer only, after its last put)

// [LAW:single-enforcer] Only the ingest thread reads the stream after start().
// [LAW:one-way-deps] Depends on core.parser only.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import TextIO

from table_explorer.core import parser

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
HEADER_LOOKAHEAD = 20


class StreamReadError(OSError):
    """The input stream failed while the ingest thread was reading it."""


class StreamingIngestor:
    """One piped-input session: a producer thread plus its delivery channel.

    Use ``StreamingIngestor.start(stream)``; it returns None when the stream
    does not begin with a header/separator pair.
    """

    def __init__(
        self,
        stream: TextIO,
        headers: list[str],
        *,
        batch_size: int = BATCH_SIZE,
        close_stream: bool = False,
    ) -> None:
        self._stream = stream
        self._headers = headers
        self._batch_size = max(1, batch_size)
        self._close_stream = close_stream
        self._batches: queue.SimpleQueue[list[list[str]]] = queue.SimpleQueue()
        # Consumer-side remainder of a batch split by try_receive(max_rows).
        self._pending: list[list[str]] = []
        self._row_count = 0
        self._cancelled = threading.Event()
        self._complete = threading.Event()
        self._error: BaseException | None = None
        self._error_reported = False
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="pte-ingest", daemon=True)

    # ─── Construction ────────────────────────────────────────────────────

    @classmethod
    def start(
        cls,
        stream: TextIO,
        *,
        batch_size: int = BATCH_SIZE,
        lookahead: int = HEADER_LOOKAHEAD,
        close_stream: bool = False,
    ) -> StreamingIngestor | None:
        """Read the header synchronously and spawn the ingest thread.

        OSError from the synchronous header read propagates to the caller.
        """
        lines: list[str] = []
        header_seen = False
        for _ in range(lookahead):
            line = stream.readline()
            if not line:
                break
            lines.append(line)
            if header_seen:
                break  # the line after the header decides
            header_seen = bool(line.strip())

        found = parser.parse_header(lines)
        if found is None:
            logger.info("no header/separator within %d lines", lookahead)
            return None
        headers, _ = found

        ingestor = cls(stream, headers, batch_size=batch_size, close_stream=close_stream)
        ingestor._thread.start()
        logger.info("ingestion started columns=%d", len(headers))
        return ingestor

    # ─── Producer (ingest thread) ────────────────────────────────────────

    def _run(self) -> None:
        batch: list[list[str]] = []
        try:
            for line in iter(self._stream.readline, ""):
                if self._cancelled.is_set():
                    logger.info("ingestion cancelled after %d rows", self._row_count)
                    return
                row = parser.parse_line(line)
                if row is None:
                    continue
                batch.append(row)
                if len(batch) >= self._batch_size:
                    self._send(batch)
                    batch = []
            if batch:
                self._send(batch)
            logger.info("ingestion finished rows=%d", self._row_count)
        except (OSError, ValueError) as e:
            # ValueError covers decode errors and reads from a closed stream.
            self._error = e
            logger.error("ingestion failed after %d rows: %s", self._row_count, e)
        finally:
            # Every put above happens-before this set.
            self._complete.set()

    def _send(self, batch: list[list[str]]) -> None:
        self._batches.put(batch)
        self._row_count += len(batch)

    # ─── Consumer API (UI thread) ────────────────────────────────────────

    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    def try_receive(self, max_rows: int) -> list[list[str]]:
        """Up to max_rows already-parsed rows, in input order. Never blocks.

        Raises StreamReadError once, after every delivered row has been
        drained, if the ingest thread hit an I/O error.
        """
        rows: list[list[str]] = []
        if max_rows <= 0:
            return rows
        if self._pending:
            rows.extend(self._pending[:max_rows])
            del self._pending[:max_rows]
        while len(rows) < max_rows:
            try:
                batch = self._batches.get_nowait()
            except queue.Empty:
                break
            room = max_rows - len(rows)
            rows.extend(batch[:room])
            if len(batch) > room:
                self._pending = batch[room:]
        if not rows and self._error is not None and not self._error_reported and self.is_drained():
            self._error_reported = True
            raise StreamReadError(str(self._error)) from self._error
        return rows

    def total_parsed(self) -> int:
        return self._row_count

    def cancel(self) -> None:
        """Ask the ingest thread to stop at the next line boundary."""
        if not self._cancelled.is_set():
            logger.debug("cancel requested")
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def is_complete(self) -> bool:
        """No more rows will arrive. Buffered rows may still be waiting."""
        return self._complete.is_set()

    def is_drained(self) -> bool:
        return self._complete.is_set() and not self._pending and self._batches.empty()

    @property
    def error(self) -> BaseException | None:
        return self._error

    # ─── Shutdown ────────────────────────────────────────────────────────

    def close(self, timeout: float | None = None) -> None:
        """Cancel and block until the ingest thread has stopped. Idempotent.

        With a timeout, a producer still parked in a blocking read is left
        behind (it is a daemon thread) and the stream is not closed under it.
        """
        if self._closed:
            return
        self.cancel()
        if self._thread.is_alive():
            self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("ingest thread still blocked in read after %.2fs", timeout or 0.0)
            self._closed = True
            return
        self._closed = True
        if self._close_stream:
            try:
                self._stream.close()
            except OSError as e:
                logger.warning("closing input stream failed: %s", e)

    def __enter__(self) -> StreamingIngestor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
