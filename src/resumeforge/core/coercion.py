from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId

logger = logging.getLogger(__name__)

# Returned by a coercion to leave the terminal value as it is.
UNCHANGED: Any = object()

Coercion = Callable[[Any], Any]

COORDINATE_PATHS: tuple[str, ...] = (
    "address.coordinates.lat",
    "address.coordinates.lng",
    "personalInfo.address.coordinates.lat",
    "personalInfo.address.coordinates.lng",
)

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S GMT",
)


def parse_date(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None

    parsed: datetime | None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_float(value: str) -> float | None:
    """Parse the longest leading decimal literal, ``"12.5kg"`` gives ``12.5``."""
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    return float(match.group(1))


def is_present(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0
    return True


def to_datetime(value: Any) -> Any:
    if isinstance(value, str) and value:
        parsed = parse_date(value)
        if parsed is not None:
            return parsed
        logger.debug("Left unparsable date %r untouched", value)
    return UNCHANGED


def to_float(value: Any) -> Any:
    if isinstance(value, str) and value:
        parsed = parse_float(value)
        if parsed is not None:
            return parsed
        logger.debug("Left non-numeric value %r untouched", value)
    return UNCHANGED


def to_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return UNCHANGED


def to_array(value: Any) -> Any:
    if is_present(value) and not isinstance(value, (list, tuple)):
        return []
    return UNCHANGED


def apply_coercion(
    document: MutableMapping[str, Any],
    paths: Iterable[str],
    coercion: Coercion,
) -> MutableMapping[str, Any]:
    """Coerce ``document`` in place at every dotted path.

    A path whose intermediate segment is missing or not a mapping is skipped.
    An intermediate list applies the rest of the path to each of its mappings.
    """
    for path in paths:
        _apply_path(document, path.split("."), coercion)
    return document


def _apply_path(node: MutableMapping[str, Any], keys: list[str], coercion: Coercion) -> None:
    *parents, last = keys
    for index, key in enumerate(parents):
        child = node.get(key)
        if isinstance(child, list):
            remaining = keys[index + 1 :]
            for item in child:
                if isinstance(item, MutableMapping):
                    _apply_path(item, remaining, coercion)
            return
        if not isinstance(child, MutableMapping):
            return
        node = child

    if last not in node:
        return
    replacement = coercion(node[last])
    if replacement is not UNCHANGED:
        node[last] = replacement


def coerce_paths(document: Mapping[str, Any], paths: Iterable[str], coercion: Coercion) -> dict[str, Any]:
    result = copy.deepcopy(dict(document))
    apply_coercion(result, paths, coercion)
    return result


def coerce_dates(document: Mapping[str, Any], paths: Iterable[str]) -> dict[str, Any]:
    return coerce_paths(document, paths, to_datetime)


def coerce_numbers(document: Mapping[str, Any], paths: Iterable[str]) -> dict[str, Any]:
    return coerce_paths(document, paths, to_float)


def coerce_object_ids(document: Mapping[str, Any], paths: Iterable[str]) -> dict[str, Any]:
    return coerce_paths(document, paths, to_object_id)


def ensure_arrays(document: Mapping[str, Any], paths: Iterable[str]) -> dict[str, Any]:
    return coerce_paths(document, paths, to_array)


def coerce_coordinates(document: Mapping[str, Any]) -> dict[str, Any]:
    return coerce_paths(document, COORDINATE_PATHS, to_float)
