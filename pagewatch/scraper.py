from __future__ import annotations

import queue
import threading
from collections import Counter
from typing import Iterable, List, Optional, Tuple

import structlog

from .base import BaseFetcher
from .cache import KeyValueCache
from .extract import extract_fragments
from .fetchers import RequestsFetcher
from .metrics import MetricsSink
from .models import FetchOutcome, RunSummary, Target, cache_key
from .senders import Sender
from .timer import ScopedTimer

logger = structlog.get_logger(__name__)

DEFAULT_ADDRESS = "everyone@everyone.com"


def _fetch_into(fetcher: BaseFetcher, target: Target, results: "queue.Queue[Tuple[Target, FetchOutcome]]") -> None:
    # Runs on a fetch thread; it gets the fetcher and the queue, nothing else.
    outcome = FetchOutcome.failure()
    try:
        outcome = fetcher.run(target)
    except Exception as exc:  # noqa: BLE001
        logger.warning("fetcher raised", uri=target.uri, error=repr(exc))
    finally:
        results.put((target, outcome))


class Scraper:
    """Fetches every target concurrently and reports fragments not seen on the previous run.

    Each run starts one thread per target. Threads only fetch; their outcomes
    are handed over a queue to the thread that called run(), which alone
    reads and writes the cache and calls the sender. Per target errors are
    logged and never stop the other targets.
    """

    def __init__(
        self,
        targets: Iterable[Target],
        sender: Sender,
        cache: KeyValueCache,
        metrics: MetricsSink,
        fetcher: Optional[BaseFetcher] = None,
        address: str = DEFAULT_ADDRESS,
    ) -> None:
        self._targets: List[Target] = list(targets)
        self._sender = sender
        self._cache = cache
        self._metrics = metrics
        self._fetcher = fetcher or RequestsFetcher()
        self._address = address
        self._warn_on_shared_keys()

    def run(self) -> RunSummary:
        """Run a single scraping iteration over all targets."""
        if not self._targets:
            raise ValueError("No targets to scrape")

        fetched = failed = notifications = 0
        with ScopedTimer("scrape timer"):
            results: queue.Queue[Tuple[Target, FetchOutcome]] = queue.Queue()
            threads = []
            for i, target in enumerate(self._targets):
                thread = threading.Thread(
                    target=_fetch_into,
                    args=(self._fetcher, target, results),
                    name=f"scrape-{i}",
                    daemon=True,
                )
                thread.start()
                threads.append(thread)

            try:
                # Every thread puts exactly one message.
                for _ in threads:
                    target, outcome = results.get()
                    if outcome.ok:
                        notifications += self.handle_page_content(target, outcome.body or "")
                        self._metrics.increment(target.uri, "OK")
                        fetched += 1
                    else:
                        self._metrics.increment(target.uri, outcome.status)
                        failed += 1
            finally:
                for thread in threads:
                    thread.join()

        summary = RunSummary(
            targets=len(self._targets),
            fetched=fetched,
            failed=failed,
            notifications=notifications,
        )
        logger.info(
            "scrape finished",
            targets=summary.targets,
            fetched=summary.fetched,
            failed=summary.failed,
            notifications=summary.notifications,
        )
        return summary

    def handle_page_content(self, target: Target, body: str) -> int:
        """Notify for each matching fragment of body that was not seen last time.

        The cached fragments for target are then replaced by the current ones,
        even when nothing matched. Returns the number of notifications sent."""
        with ScopedTimer(f"handle_page_content({target.uri})"):
            with ScopedTimer(f"parse_document({target.uri})"):
                fragments = extract_fragments(body, target.text)

            key = cache_key(target)
            previous = self._read_cache(key)
            old_matches = set(previous.splitlines())

            sent = 0
            with ScopedTimer(f"lookup and compare for {target.uri}"):
                for fragment in fragments:
                    if fragment in old_matches:
                        continue
                    try:
                        self._sender.send(self._address, target, f"Found match: {fragment}")
                        sent += 1
                    except Exception as exc:  # noqa: BLE001
                        logger.warning("failed to send notification", uri=target.uri, error=repr(exc))

            try:
                self._cache.put(key, "\n".join(fragments))
            except Exception as exc:  # noqa: BLE001
                logger.warning("failed to write into target cache", uri=target.uri, error=repr(exc))
        return sent

    def _read_cache(self, key: str) -> str:
        try:
            return self._cache.get(key) or ""
        except Exception as exc:  # noqa: BLE001
            logger.warning("failed to read target cache", key=key, error=repr(exc))
            return ""

    def _warn_on_shared_keys(self) -> None:
        counts = Counter(cache_key(t) for t in self._targets)
        for key, count in counts.items():
            if count > 1:
                logger.warning("targets share a cache key and will overwrite each other", key=key, count=count)
