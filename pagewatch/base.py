from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog

from .models import FetchOutcome, Target
from .timer import ScopedTimer

logger = structlog.get_logger(__name__)


class BaseFetcher(ABC):
    """Abstract base class defining the fetch pipeline for one target.

    - Any 2xx status is a success; anything else fails with the status code.
    - Exceptions fail with the status carried by the exception's response,
      if there is one, else "unknown".
    - A body that cannot be decoded as text fails with "unknown".
    """

    def __init__(self, timeout: float = 30.0, user_agent: Optional[str] = None) -> None:
        self._timeout = timeout
        self._user_agent = user_agent

    def run(self, target: Target) -> FetchOutcome:
        with ScopedTimer(f"scrape for {target.uri}"):
            try:
                self.validate(target)
                response = self.fetch(target)
            except Exception as exc:  # noqa: BLE001
                status = self.status_of(exc)
                logger.warning("failed to scrape", uri=target.uri, status=status, error=repr(exc))
                return FetchOutcome.failure(status)

            status_code = getattr(response, "status_code", None)
            if status_code is None or not 200 <= int(status_code) < 300:
                logger.warning("failed to scrape", uri=target.uri, status=status_code)
                return FetchOutcome.failure(str(status_code) if status_code is not None else None)

            try:
                body = self.decode(response)
            except Exception as exc:  # noqa: BLE001
                logger.warning("failed to decode body", uri=target.uri, error=repr(exc))
                return FetchOutcome.failure()

            logger.debug("http-response", uri=target.uri, status="ok", resp_size=len(body))
            return FetchOutcome.success(body)

    def validate(self, target: Target) -> None:
        if not target.uri:
            raise ValueError("target.uri is required")

    @abstractmethod
    def fetch(self, target: Target) -> Any:
        ...

    def decode(self, response: Any) -> str:
        return response.text

    def headers(self) -> dict:
        if self._user_agent:
            return {"User-Agent": self._user_agent}
        return {}

    @staticmethod
    def status_of(exc: BaseException) -> Optional[str]:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
        return str(status_code) if status_code else None
