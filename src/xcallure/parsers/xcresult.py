"""Accessors for xcresulttool JSON documents.

``xcrun xcresulttool get --format json`` wraps every scalar in
``{"_type": {...}, "_value": "..."}`` and every list in
``{"_type": {...}, "_values": [...]}``. Any field may be missing, so every
accessor here returns ``None`` or an empty list instead of raising.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from xcallure.core.exceptions import InvalidTestSummaryError, UnparseableDateError

VALUE = "_value"
VALUES = "_values"

# xcresult dates look like 2021-03-02T15:04:05.123+0300
DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)


def has(node: Any, key: str) -> bool:
    """Check whether ``node`` is an object that carries ``key``."""
    return isinstance(node, dict) and node.get(key) is not None


def get_value(node: Any, key: str) -> str | None:
    """Return the scalar text of ``node[key]``, or None when absent."""
    if not has(node, key):
        return None
    return unwrap_value(node[key])


def unwrap_value(field: Any) -> str | None:
    """Return the text of a scalar field such as ``{"_value": "42"}``."""
    if isinstance(field, dict):
        value = field.get(VALUE)
    else:
        value = field
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_values(node: Any, key: str) -> list[Any]:
    """Return the list held by ``node[key]``, or an empty list when absent."""
    if not has(node, key):
        return []
    field = node[key]
    if isinstance(field, dict):
        field = field.get(VALUES)
    return list(field) if isinstance(field, list) else []


def get_bool(node: Any, key: str) -> bool:
    """Return ``node[key]`` as a boolean; only a case-insensitive ``true`` is True."""
    value = get_value(node, key)
    return value is not None and value.strip().lower() == "true"


def find_value(node: Any, key: str) -> Any:
    """Depth-first search for the first ``key`` anywhere below ``node``."""
    if isinstance(node, dict):
        if key in node:
            return node[key]
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None
    for child in children:
        found = find_value(child, key)
        if found is not None:
            return found
    return None


def parse_date(text: str) -> int:
    """Parse an xcresult timestamp into epoch milliseconds.

    Accepts the xcresulttool text format as well as plain fractional
    seconds since the epoch.

    Raises:
        UnparseableDateError: If ``text`` matches neither form.
    """
    candidate = text.strip()
    try:
        return int(float(candidate) * 1000)
    except (ValueError, OverflowError):
        pass
    for date_format in DATE_FORMATS:
        try:
            parsed = datetime.strptime(candidate, date_format)
        except ValueError:
            continue
        return int(parsed.timestamp() * 1000)
    raise UnparseableDateError(text)


def load_test_summary(path: Path) -> dict[str, Any]:
    """Load an ActionTestSummary JSON document from disk.

    Args:
        path: Path to the JSON produced by xcresulttool.

    Returns:
        The parsed document.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        InvalidTestSummaryError: If the content is not a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Test summary not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidTestSummaryError(str(path), f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise InvalidTestSummaryError(str(path), "root is not a JSON object")
    return data
