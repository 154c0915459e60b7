from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, ClassVar

from bson import ObjectId
from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from resumeforge.core.converters import convert
from resumeforge.types import encode_document, new_object_id


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class DocumentMixin:
    """Maps a document's camelCase keys onto snake_case columns.

    JSON columns hold JSON-native values; ``to_document`` runs the entity's
    converter over them so dates and identifiers come back typed.
    """

    __entity_kind__: ClassVar[str]
    __document_fields__: ClassVar[Mapping[str, str]]

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)

    def storage_document(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in self.__document_fields__.items()}

    def to_document(self, include_meta: bool = False) -> dict[str, Any]:
        document = convert(self.__entity_kind__, self.storage_document())
        if include_meta:
            document = {
                "_id": self.id,
                **document,
                "createdAt": getattr(self, "created_at", None),
                "updatedAt": getattr(self, "updated_at", None),
            }
        return document

    def apply_document(self, document: Mapping[str, Any]) -> None:
        json_attrs = self._json_attributes()
        for key, value in document.items():
            attr = self.__document_fields__.get(key)
            if attr is None:
                continue
            if attr in json_attrs:
                value = encode_document(value)
            elif isinstance(value, ObjectId):
                value = str(value)
            setattr(self, attr, value)

    @classmethod
    def _json_attributes(cls) -> frozenset[str]:
        return frozenset(column.key for column in cls.__table__.columns if isinstance(column.type, JSON))
