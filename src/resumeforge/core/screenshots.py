from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawUrl:
    url: str


@dataclass(frozen=True, slots=True)
class CanonicalScreenshot:
    value: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class MalformedScreenshot:
    value: Any


ScreenshotEntry = RawUrl | CanonicalScreenshot | MalformedScreenshot


def classify_screenshot(entry: Any) -> ScreenshotEntry:
    if isinstance(entry, Mapping) and entry.get("url"):
        return CanonicalScreenshot(entry)
    if isinstance(entry, str):
        return RawUrl(entry)
    return MalformedScreenshot(entry)


def normalize_screenshot(entry: Any, *, now: datetime | None = None) -> Any:
    match classify_screenshot(entry):
        case CanonicalScreenshot(value=value):
            return value
        case RawUrl(url=url):
            return {"url": url, "caption": "", "uploadedAt": now or datetime.now(UTC)}
        case MalformedScreenshot(value=value):
            # Kept as-is: no url means no caption/uploadedAt either.
            logger.warning("Screenshot entry has no url and was left unnormalized: %r", value)
            return value


def normalize_screenshots(entries: list[Any], *, now: datetime | None = None) -> list[Any]:
    stamp = now or datetime.now(UTC)
    return [normalize_screenshot(entry, now=stamp) for entry in entries]


def normalize_project_screenshots(projects: Any, *, now: datetime | None = None) -> Any:
    """Return ``projects`` with every project's screenshot list in canonical form.

    Anything that is not a list of projects is returned untouched.
    """
    if not isinstance(projects, list):
        return projects

    stamp = now or datetime.now(UTC)
    normalized: list[Any] = []
    for project in projects:
        if isinstance(project, Mapping) and isinstance(project.get("screenshots"), list):
            project = {**project, "screenshots": normalize_screenshots(project["screenshots"], now=stamp)}
        normalized.append(project)
    return normalized


def normalize_update_screenshots(update: Mapping[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
    """Normalize screenshots inside an update payload.

    Handles a direct ``projects`` replacement and ``$set.projects``; the
    payload itself is not modified.
    """
    result = copy.deepcopy(dict(update))
    stamp = now or datetime.now(UTC)

    if "projects" in result:
        result["projects"] = normalize_project_screenshots(result["projects"], now=stamp)

    set_clause = result.get("$set")
    if isinstance(set_clause, dict) and "projects" in set_clause:
        set_clause["projects"] = normalize_project_screenshots(set_clause["projects"], now=stamp)

    return result
