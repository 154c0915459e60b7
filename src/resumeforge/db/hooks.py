from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from resumeforge.core.converters import ConversionPlan, convert_document
from resumeforge.core.versioning import append_revision, current_version, record_revision
from resumeforge.db.models import Resume

logger = logging.getLogger(__name__)

PRE_SAVE_PLAN = ConversionPlan(
    array_paths=("skills", "hobbies", "socialMedia", "languages", "certifications"),
    coordinates=True,
    screenshots=True,
)


def normalize_resume(resume: Resume) -> None:
    storage = resume.storage_document()
    normalized = convert_document(storage, PRE_SAVE_PLAN)
    changed = {key: value for key, value in normalized.items() if value != storage.get(key)}
    if changed:
        resume.apply_document(changed)


def committed_document(resume: Resume) -> dict[str, Any]:
    """Return the stored form of ``resume`` as of its last load or commit."""
    state = inspect(resume)
    document: dict[str, Any] = {}
    for key, attr in resume.__document_fields__.items():
        history = state.attrs[attr].load_history()
        if history.deleted:
            document[key] = history.deleted[0]
        elif history.unchanged:
            document[key] = history.unchanged[0]
        else:
            document[key] = None
    return document


def version_resume(resume: Resume) -> None:
    before = committed_document(resume)
    committed_version = current_version(before)
    committed_history = list(before.get("previousVersions") or [])

    revision = record_revision(before, resume.storage_document())
    if revision is None:
        resume.version = committed_version
        resume.previous_versions = committed_history
        return

    resume.version = committed_version + 1
    resume.previous_versions = append_revision(committed_history, revision)
    logger.info("Resume %s moved to version %s", resume.id, resume.version)


@event.listens_for(Session, "before_flush")
def resume_pre_save(session: Session, flush_context: Any, instances: Any) -> None:
    for obj in list(session.new):
        if isinstance(obj, Resume):
            normalize_resume(obj)
            obj.version = 1
            obj.previous_versions = []

    for obj in list(session.dirty):
        if isinstance(obj, Resume) and session.is_modified(obj):
            normalize_resume(obj)
            version_resume(obj)
