from __future__ import annotations

import queue
import threading
import time
from typing import List, Optional

import structlog

from .timer import ScopedTimer

logger = structlog.get_logger(__name__)

DEFAULT_FLUSH_BYTES = 256


class MetricsSink:
    """Appends request metrics to a CSV file using a background writer thread.

    Each event is a line ``<timestamp>,inc_req,<target>,<status>`` where the
    timestamp is whole seconds since the unix epoch. Lines are buffered and
    appended to the file once the buffer grows past ``flush_bytes`` and when
    the sink is closed. Failing to open or write the file is logged and
    otherwise ignored; metrics never fail the caller.

    With ``path=None`` events are consumed and logged only.
    """

    def __init__(self, path: Optional[str], flush_bytes: int = DEFAULT_FLUSH_BYTES) -> None:
        self._path = path
        self._flush_bytes = flush_bytes
        self._queue: queue.Queue[Optional[str]] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._writer, name="metrics-writer", daemon=True)
        self._thread.start()

    def increment(self, target: str, status: str) -> None:
        """Record one request against target with the given status."""
        with ScopedTimer("increment_num_requests"):
            entry = f"{int(time.time())},inc_req,{target},{status}"
            with self._lock:
                if self._closed:
                    logger.warning("metrics sink closed, dropping entry", entry=entry)
                    return
                self._queue.put(entry)

    def close(self) -> None:
        """Flush buffered entries and wait for the writer thread to exit."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)
        logger.info("closing metrics sink")
        self._thread.join()

    def __enter__(self) -> "MetricsSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _writer(self) -> None:
        logger.info("starting metrics writer", path=self._path)
        buffer: List[str] = []
        size = 0
        while True:
            entry = self._queue.get()
            if entry is None:
                break
            logger.debug("metrics-writer: writing entry", entry=entry)
            line = entry + "\n"
            buffer.append(line)
            size += len(line.encode("utf-8"))
            if size > self._flush_bytes:
                self._flush(buffer, size)
                buffer = []
                size = 0
        if buffer:
            self._flush(buffer, size)
        logger.info("finished metrics writer")

    def _flush(self, buffer: List[str], size: int) -> None:
        if self._path is None:
            return
        logger.debug("flushing metrics buffer", path=self._path, bytes=size)
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write("".join(buffer))
        except OSError as exc:
            logger.warning("failed to write metrics file", path=self._path, error=str(exc))
