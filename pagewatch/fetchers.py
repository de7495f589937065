from __future__ import annotations

from typing import Any

import requests
from curl_cffi import requests as curl_requests

from .base import BaseFetcher
from .models import Target

DEFAULT_USER_AGENT = "pagewatch/0.1"


class RequestsFetcher(BaseFetcher):
    """Plain HTTP GET with requests.

    requests applies the timeout to connecting and to each socket read, not
    to the whole transfer; a server trickling bytes can take longer."""

    def fetch(self, target: Target) -> Any:
        return requests.get(target.uri, headers=self.headers(), timeout=self._timeout)

    def headers(self) -> dict:
        return {"User-Agent": self._user_agent or DEFAULT_USER_AGENT}


class ImpersonatingFetcher(BaseFetcher):
    """HTTP GET through curl_cffi, presenting a browser TLS and header fingerprint.

    For sites that refuse requests' default client. The browser's own
    User-Agent is kept unless one was configured explicitly. The timeout
    bounds the whole transfer."""

    def __init__(self, *args, impersonate: str = "chrome120", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._impersonate = impersonate

    def fetch(self, target: Target) -> Any:
        # A fresh session per call; fetches run on separate threads.
        session = curl_requests.Session()
        try:
            return session.get(
                target.uri,
                headers=self.headers() or None,
                impersonate=self._impersonate,
                timeout=self._timeout,
            )
        finally:
            session.close()
