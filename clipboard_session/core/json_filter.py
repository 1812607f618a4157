"""Recursive structural search over JSON trees."""

import re
from typing import Any


class _NoMatch:
    """Marker returned when nothing inside a value matches the query."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = _NoMatch()


def scalar_text(value: Any) -> str:
    """Canonical JSON-style text of a scalar (``true``, ``null``, ``1``).

    Float exponents drop zero padding (``1e-7``, not ``1e-07``).
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return re.sub(r"e([+-])0*(\d)", r"e\1\2", repr(value))
    return str(value)


def filter_json(value: Any, query: str) -> Any:
    """Narrow ``value`` to the substructures matching ``query``.

    Matching is a case-insensitive substring test against scalar text,
    object keys and array indices. An empty query returns ``value`` as is.
    Returns ``NO_MATCH`` when nothing matched.
    """
    if not query:
        return value
    return _filter(value, query.lower())


def _filter(value: Any, query: str) -> Any:
    if isinstance(value, dict):
        return _filter_object(value, query)
    if isinstance(value, list):
        return _filter_array(value, query)
    if query in scalar_text(value).lower():
        return value
    return NO_MATCH


def _filter_array(items: list, query: str) -> Any:
    retained = []
    for index, item in enumerate(items):
        filtered = _filter(item, query)
        if filtered is not NO_MATCH or query in str(index):
            retained.append(filtered)

    if not retained:
        return NO_MATCH

    # An index-only match keeps the element's filtered result, which
    # collapses to nothing when the element itself did not match.
    return [item for item in retained if item is not NO_MATCH]


def _filter_object(obj: dict, query: str) -> Any:
    result = {}
    for key, item in obj.items():
        filtered = _filter(item, query)
        if query in key.lower():
            result[key] = item
        elif filtered is not NO_MATCH:
            result[key] = filtered

    if not result:
        return NO_MATCH
    return result
