from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from resumeforge.core.documents import (
    CertificationDocument,
    DocumentModel,
    HobbyDocument,
    LanguageDocument,
    ResumeDocument,
    SkillDocument,
    SocialMediaDocument,
    TemplateDocument,
    UserDocument,
)
from resumeforge.core.errors import DocumentValidationError, FieldError
from resumeforge.types import EntityKind

DOCUMENT_MODELS: Mapping[EntityKind, type[DocumentModel]] = MappingProxyType(
    {
        "resume": ResumeDocument,
        "user": UserDocument,
        "hobby": HobbyDocument,
        "skill": SkillDocument,
        "socialMedia": SocialMediaDocument,
        "language": LanguageDocument,
        "certification": CertificationDocument,
        "template": TemplateDocument,
    }
)


def get_document_model(kind: EntityKind) -> type[DocumentModel]:
    model = DOCUMENT_MODELS.get(kind)
    if model is None:
        raise ValueError(f"Unknown entity kind {kind}")
    return model


def _field_errors(exc: ValidationError, prefix: tuple[str, ...] = ()) -> list[FieldError]:
    errors: list[FieldError] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in (*prefix, *error["loc"]))
        message = "is required" if error["type"] == "missing" else error["msg"]
        errors.append(FieldError(field=field or "document", message=message))
    return errors


def validate_create(kind: EntityKind, document: Mapping[str, Any]) -> dict[str, Any]:
    model = get_document_model(kind)
    try:
        instance = model.model_validate(dict(document))
    except ValidationError as exc:
        raise DocumentValidationError(_field_errors(exc)) from exc
    return instance.model_dump(by_alias=True)


_ADAPTER_CONFIG = ConfigDict(arbitrary_types_allowed=True)


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, DocumentModel)


@lru_cache(maxsize=None)
def _field_adapters(kind: EntityKind) -> dict[str, tuple[str, TypeAdapter[Any]]]:
    model = get_document_model(kind)
    adapters: dict[str, tuple[str, TypeAdapter[Any]]] = {}
    for name, info in model.model_fields.items():
        alias = info.alias or to_camel(name)
        annotation = Annotated[(info.annotation, *info.metadata)] if info.metadata else info.annotation
        adapter = TypeAdapter(annotation, config=None if _is_model(annotation) else _ADAPTER_CONFIG)
        adapters[alias] = (alias, adapter)
        adapters[name] = (alias, adapter)
    return adapters


def field_default(kind: EntityKind, field: str) -> Any:
    """Return the value a removed field falls back to; ``None`` for required fields."""
    model = get_document_model(kind)
    for name, info in model.model_fields.items():
        if field not in (name, info.alias or to_camel(name)):
            continue
        if info.is_required():
            return None
        return info.get_default(call_default_factory=True)
    return None


def validate_update(kind: EntityKind, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate only the supplied top-level fields of ``kind``.

    Required-field rules for absent fields are not enforced. Unknown fields are
    dropped, matching the ``extra="ignore"`` policy of full validation.
    """
    adapters = _field_adapters(kind)

    cleaned: dict[str, Any] = {}
    errors: list[FieldError] = []
    for key, value in changes.items():
        entry = adapters.get(key)
        if entry is None:
            continue
        field, adapter = entry
        try:
            validated = adapter.validate_python(value)
        except ValidationError as exc:
            errors.extend(_field_errors(exc, (field,)))
            continue
        cleaned[field] = adapter.dump_python(validated, by_alias=True)

    if errors:
        raise DocumentValidationError(errors)
    return cleaned
