"""Best-effort navigation over untyped JSON payloads."""

import json
import logging
from typing import Any, Iterator, Optional, Sequence, Union

logger = logging.getLogger(__name__)

PathKey = Union[str, int]


def get_at_path(data: Any, path: Sequence[PathKey]) -> Any:
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        elif isinstance(current, dict):
            current = current.get(key)
        else:
            return None
        if current is None:
            return None
    return current


def get_str_at_path(data: Any, path: Sequence[PathKey]) -> Optional[str]:
    """Return the non-blank string at path, or None for any other shape."""
    value = get_at_path(data, path)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def first_str(data: Any, *paths: Sequence[PathKey]) -> Optional[str]:
    for path in paths:
        value = get_str_at_path(data, path)
        if value:
            return value
    return None


def iter_values(data: Any) -> Iterator[Any]:
    if isinstance(data, dict):
        yield from data.values()
    elif isinstance(data, list):
        yield from data


def find_first_key(data: Any, key: str, max_depth: int = 12) -> Optional[str]:
    """Depth-first search for the first non-blank string stored under key."""
    if max_depth < 0:
        return None
    if isinstance(data, dict):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    for child in iter_values(data):
        if isinstance(child, (dict, list)):
            found = find_first_key(child, key, max_depth - 1)
            if found:
                return found
    return None


def loads_or_none(raw: Optional[str]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        logger.debug(f"Ignoring malformed JSON payload: {exc}")
        return None
