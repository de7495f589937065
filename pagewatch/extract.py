from __future__ import annotations

from typing import Iterator, List

import structlog
from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString

logger = structlog.get_logger(__name__)


def parse_document(body: str) -> BeautifulSoup:
    return BeautifulSoup(body, "html.parser")


def iter_text_nodes(soup: BeautifulSoup) -> Iterator[str]:
    """Yield every text node in document order, unmodified.

    Comments, doctypes, CDATA and processing instructions are skipped."""
    for node in soup.find_all(string=True):
        if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
            continue
        yield str(node)


def fragments_of(node: str, text: str) -> List[str]:
    """Fragments reported for one text node that contains ``text``.

    These are the node's stripped lines that contain ``text``. When no
    single stripped line does, because the match spans a line break or
    needs the surrounding whitespace, the whole node is reported with its
    stripped lines joined by single spaces. Fragments never contain a
    newline, since cached fragments are stored one per line."""
    lines = [line.strip() for line in node.splitlines()]
    lines = [line for line in lines if line]
    matched = [line for line in lines if text in line]
    if matched:
        return matched
    if lines:
        return [" ".join(lines)]
    return []


def extract_fragments(body: str, text: str) -> List[str]:
    """Distinct fragments of body's text nodes containing ``text``, in order of first appearance.

    Matching is a literal, case-sensitive substring test on the raw text
    node. A body the parser cannot handle yields no fragments."""
    try:
        soup = parse_document(body)
    except Exception as exc:  # noqa: BLE001
        logger.warning("failed to parse document", error=repr(exc))
        return []

    seen = set()
    fragments: List[str] = []
    for node in iter_text_nodes(soup):
        if text not in node:
            continue
        for fragment in fragments_of(node, text):
            if fragment not in seen:
                seen.add(fragment)
                fragments.append(fragment)
    return fragments
