from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Annotated, Any, Literal

from bson import ObjectId
from pydantic import PlainSerializer, PlainValidator

EntityKind = Literal[
    "resume",
    "user",
    "hobby",
    "skill",
    "socialMedia",
    "language",
    "certification",
    "template",
]
StandaloneKind = Literal["hobby", "skill", "socialMedia", "language", "certification"]

ResumeStatus = Literal["draft", "published", "archived", "pending", "approved", "rejected"]
ApprovalStatus = Literal["pending", "approved", "rejected"]
ReviewDecision = Literal["approved", "rejected"]
UserRole = Literal["user", "admin", "super_admin"]
LanguageProficiency = Literal["basic", "conversational", "fluent", "native"]
CertificationCategory = Literal["technical", "professional", "academic", "other"]
CertificationLevel = Literal["beginner", "intermediate", "advanced", "expert"]
TemplateCategory = Literal["professional", "creative", "minimal", "modern", "classic", "tech", "elegant"]

ADMIN_ROLES: frozenset[str] = frozenset({"admin", "super_admin"})


def new_object_id() -> str:
    return str(ObjectId())


def is_object_id(value: Any) -> bool:
    return isinstance(value, ObjectId) or (isinstance(value, str) and ObjectId.is_valid(value))


def _validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError("must be a valid 24-character hex identifier")


ObjectIdField = Annotated[
    ObjectId,
    PlainValidator(_validate_object_id),
    PlainSerializer(str, when_used="json"),
]


def encode_document(value: Any) -> Any:
    """Return a JSON-native copy of a typed document.

    ObjectIds become hex strings and datetimes become ISO 8601 strings; the
    entity converters reverse this when a stored row is hydrated.
    """
    if isinstance(value, Mapping):
        return {str(key): encode_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
