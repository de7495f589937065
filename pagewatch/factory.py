from __future__ import annotations

from typing import Dict, Optional

from .base import BaseFetcher
from .fetchers import ImpersonatingFetcher, RequestsFetcher

FETCHERS = ("requests", "impersonate")


class FetcherFactory:
    """Creates fetchers by name.

    Fetchers hold no per-request state, so one instance per name is cached
    and shared by all fetch threads."""

    def __init__(self, timeout: float = 30.0, user_agent: Optional[str] = None) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        self._cache: Dict[str, BaseFetcher] = {}

    def create_fetcher(self, name: str) -> BaseFetcher:
        if name in self._cache:
            return self._cache[name]

        if name == "requests":
            fetcher: BaseFetcher = RequestsFetcher(timeout=self._timeout, user_agent=self._user_agent)
        elif name == "impersonate":
            fetcher = ImpersonatingFetcher(timeout=self._timeout, user_agent=self._user_agent)
        else:
            raise ValueError(f"Unknown fetcher: {name}")

        self._cache[name] = fetcher
        return fetcher
