"""
Dotted-path lookup in nested response mappings.
"""

from collections.abc import Mapping
from typing import Any


def extract_value(path: str, data: Any) -> Any:
    """
    Look up a dotted path such as ``hits.total`` in nested mappings.

    Lists met along the way are searched element by element and the
    non-missing results are collected into a list.

    Args:
        path: Dot separated key path
        data: Nested mapping/list structure

    Returns:
        The value found, or None if any part of the path is missing
    """
    return _extract(path.split("."), 0, data)


def _extract(keys: list[str], index: int, data: Any) -> Any:
    if index == len(keys):
        return data

    if isinstance(data, Mapping):
        if keys[index] not in data:
            return None
        return _extract(keys, index + 1, data[keys[index]])

    if isinstance(data, list):
        found = [_extract(keys, index, item) for item in data]
        found = [item for item in found if item is not None]
        return found or None

    return None
