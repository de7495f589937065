from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Target:
    # The uri the scraper fetches.
    uri: str
    # Substring searched for in the text of the page at uri.
    text: str
    # Only for humans.
    description: str = ""


def cache_key(target: Target) -> str:
    """Key under which a target's last seen fragments are stored.

    The parts are joined with a bare colon and not escaped, so a text
    containing a colon can collide with another target's key."""
    return f"{target.uri}:{target.text}"


@dataclass(frozen=True)
class FetchOutcome:
    ok: bool
    status: str
    body: Optional[str] = None

    @classmethod
    def success(cls, body: str) -> "FetchOutcome":
        return cls(ok=True, status="OK", body=body)

    @classmethod
    def failure(cls, status: Optional[str] = None) -> "FetchOutcome":
        return cls(ok=False, status=status or "unknown")


@dataclass(frozen=True)
class RunSummary:
    targets: int
    fetched: int
    failed: int
    notifications: int
