from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Union

import yaml

from .models import Target


def parse_targets(data: Any) -> List[Target]:
    """Build targets from a list of mappings with uri, text and an optional description."""
    if not isinstance(data, list):
        raise ValueError("targets must be a list of mappings")

    targets: List[Target] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"target #{i} is not a mapping")
        uri = item.get("uri")
        text = item.get("text")
        if not uri or not text:
            raise ValueError(f"target #{i} needs both uri and text")
        targets.append(Target(uri=str(uri), text=str(text), description=str(item.get("description") or "")))
    return targets


def load_targets(path: Union[str, Path]) -> List[Target]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    targets = parse_targets(data or [])
    if not targets:
        raise ValueError(f"No targets found in {path}")
    return targets


def dump_targets(targets: Iterable[Target]) -> str:
    rows = []
    for t in targets:
        row = {"uri": t.uri, "text": t.text}
        if t.description:
            row["description"] = t.description
        rows.append(row)
    return yaml.safe_dump(rows, sort_keys=False, allow_unicode=True)
