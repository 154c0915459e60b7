from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

from resumeforge.core.errors import DocumentValidationError, FieldError

SUPPORTED_OPERATORS: frozenset[str] = frozenset({"$set", "$unset"})


def _unsettable(path: str) -> DocumentValidationError:
    return DocumentValidationError([FieldError(path, "cannot be set through a non-object")])


def _index(node: list[Any], key: str, path: str) -> int:
    if not key.isdigit() or int(key) >= len(node):
        raise DocumentValidationError([FieldError(path, "does not address an existing list element")])
    return int(key)


def _set_path(document: dict[str, Any], path: str, value: Any) -> None:
    *parents, last = path.split(".")
    node: Any = document
    for key in parents:
        if isinstance(node, list):
            child = node[_index(node, key, path)]
        else:
            child = node.get(key)
            if child is None:
                child = {}
                node[key] = child
        if not isinstance(child, (dict, list)):
            raise _unsettable(path)
        node = child

    if isinstance(node, list):
        node[_index(node, last, path)] = value
    else:
        node[last] = value


def _unset_path(document: dict[str, Any], path: str) -> None:
    *parents, last = path.split(".")
    node: Any = document
    for key in parents:
        if isinstance(node, dict):
            node = node.get(key)
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            return
    if isinstance(node, dict):
        node.pop(last, None)
    elif isinstance(node, list) and last.isdigit() and int(last) < len(node):
        node[int(last)] = None


def apply_update(
    document: Mapping[str, Any],
    update: Mapping[str, Any],
    default: Callable[[str], Any] | None = None,
) -> dict[str, Any]:
    """Apply an update payload and return the new values of touched top-level fields.

    Keys starting with ``$`` are operators (``$set`` with dotted paths,
    ``$unset``); any other key replaces the top-level field. A numeric path
    segment addresses an existing list element. A top-level field removed by
    ``$unset`` is reported as ``default(field)``, or ``None`` without one.
    """
    working = copy.deepcopy(dict(document))
    touched: set[str] = set()

    for key, value in update.items():
        if not key.startswith("$"):
            working[key] = copy.deepcopy(value)
            touched.add(key)
            continue
        if key not in SUPPORTED_OPERATORS:
            raise DocumentValidationError([FieldError(key, "is not a supported update operator")])
        if not isinstance(value, Mapping):
            raise DocumentValidationError([FieldError(key, "expects an object of field paths")])

        for path, operand in value.items():
            if key == "$set":
                _set_path(working, path, copy.deepcopy(operand))
            else:
                _unset_path(working, path)
            touched.add(path.split(".", 1)[0])

    changes: dict[str, Any] = {}
    for field in touched:
        if field in working:
            changes[field] = working[field]
        else:
            changes[field] = default(field) if default is not None else None
    return changes
