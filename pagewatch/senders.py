from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Tuple, Union

import requests
import structlog

from .models import Target

logger = structlog.get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class Sender(ABC):
    """Sends notification messages to an address.

    Implementations may email, log or print matches. send() is called from
    the scraper's aggregation loop and must return in bounded time."""

    @abstractmethod
    def send(self, address: str, target: Target, message: str) -> None:
        ...


class PrintSender(Sender):
    """Prints every message to stdout."""

    def send(self, address: str, target: Target, message: str) -> None:
        print(f"[to {address}] Target {target.uri}. msg: \n {message}")


class NullSender(Sender):
    """Keeps sent messages in memory instead of delivering them."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, Target, str]] = []

    def send(self, address: str, target: Target, message: str) -> None:
        self.sent.append((address, target, message))


class TelegramSender(Sender):
    """Posts messages to a Telegram chat through the Bot API.

    The address argument is ignored; every message goes to chat_id."""

    def __init__(
        self,
        token: str,
        chat_id: Union[int, str],
        timeout: float = 10.0,
        api_url: str = TELEGRAM_API_URL,
    ) -> None:
        if not token:
            raise ValueError("a telegram bot token is required")
        self._url = f"{api_url}/bot{token}/sendMessage"
        self._chat_id = chat_id
        self._timeout = timeout
        self._session = requests.Session()

    def send(self, address: str, target: Target, message: str) -> None:
        logger.info("sending telegram message", to=address, uri=target.uri)
        try:
            resp = self._session.post(
                self._url,
                json={"chat_id": self._chat_id, "text": f"{target.uri}: {message}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("failed to send telegram message", uri=target.uri, error=str(exc))
