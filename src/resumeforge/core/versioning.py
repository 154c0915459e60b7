from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from resumeforge.core.errors import VersionConflictError
from resumeforge.types import encode_document

logger = logging.getLogger(__name__)

# Never part of a snapshot: identity, timestamps and version bookkeeping.
EXCLUDED_FROM_SNAPSHOT: frozenset[str] = frozenset(
    {"_id", "id", "createdAt", "updatedAt", "version", "previousVersions"}
)


@dataclass(frozen=True, slots=True)
class Revision:
    version: int
    data: dict[str, Any]
    created_at: datetime

    def as_entry(self) -> dict[str, Any]:
        return {"version": self.version, "data": self.data, "createdAt": self.created_at}


def take_snapshot(document: Mapping[str, Any]) -> dict[str, Any]:
    return encode_document({key: value for key, value in document.items() if key not in EXCLUDED_FROM_SNAPSHOT})


def has_changes(before: Mapping[str, Any], after: Mapping[str, Any]) -> bool:
    return take_snapshot(before) != take_snapshot(after)


def current_version(document: Mapping[str, Any]) -> int:
    return int(document.get("version") or 1)


def record_revision(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    now: datetime | None = None,
) -> Revision | None:
    """Return the revision produced by saving ``after`` over ``before``.

    ``None`` means nothing outside the bookkeeping fields changed, so no
    snapshot is taken and the version stays put.
    """
    if not has_changes(before, after):
        return None
    version = current_version(before)
    logger.info("Snapshot taken of version %s", version)
    return Revision(version=version, data=take_snapshot(before), created_at=now or datetime.now(UTC))


def append_revision(history: list[Any], revision: Revision) -> list[Any]:
    return [*history, encode_document(revision.as_entry())]


def check_history(document: Mapping[str, Any]) -> list[str]:
    problems: list[str] = []
    history = document.get("previousVersions") or []
    version = current_version(document)

    if version != len(history) + 1:
        problems.append(f"version is {version} but {len(history)} snapshots are recorded")

    previous = 0
    for index, entry in enumerate(history):
        entry_version = entry.get("version") if isinstance(entry, Mapping) else None
        if not isinstance(entry_version, (int, float)):
            problems.append(f"snapshot {index} has no version")
            continue
        if entry_version <= previous:
            problems.append(f"snapshot {index} version {entry_version} does not increase")
        if entry_version != index + 1:
            problems.append(f"snapshot {index} should record version {index + 1}, found {entry_version}")
        previous = entry_version
    return problems


def ensure_expected_version(resume_id: str, current: int, expected: int | None) -> None:
    if expected is not None and int(expected) != current:
        logger.warning("Rejected write to resume %s: expected version %s, found %s", resume_id, expected, current)
        raise VersionConflictError(resume_id, expected=int(expected), actual=current)
