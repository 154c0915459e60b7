from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from functools import partial
from types import MappingProxyType
from typing import Any

from bson import ObjectId
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from resumeforge.config import get_settings
from resumeforge.core.converters import convert
from resumeforge.core.errors import DocumentValidationError, FieldError, VersionConflictError
from resumeforge.core.operators import apply_update
from resumeforge.core.passwords import generate_token, hash_password, hash_token, verify_password
from resumeforge.core.screenshots import normalize_update_screenshots
from resumeforge.core.validation import field_default, validate_create, validate_update
from resumeforge.core.versioning import ensure_expected_version
from resumeforge.db.models import (
    Certification,
    Hobby,
    Language,
    Resume,
    SocialMedia,
    Skill,
    Template,
    User,
)
from resumeforge.types import StandaloneKind, encode_document, is_object_id

logger = logging.getLogger(__name__)

ENTRY_MODELS: Mapping[StandaloneKind, type[Hobby | Skill | SocialMedia | Language | Certification]] = MappingProxyType(
    {
        "hobby": Hobby,
        "skill": Skill,
        "socialMedia": SocialMedia,
        "language": Language,
        "certification": Certification,
    }
)

# Managed by the server, never taken from a client payload.
RESUME_PROTECTED_FIELDS: tuple[str, ...] = (
    "_id",
    "id",
    "createdAt",
    "updatedAt",
    "version",
    "previousVersions",
    "adminApproval",
)
ENTRY_PROTECTED_FIELDS: tuple[str, ...] = ("_id", "id", "user", "createdAt", "updatedAt")
TEMPLATE_PROTECTED_FIELDS: tuple[str, ...] = ("_id", "id", "usageCount", "rating", "createdBy", "createdAt", "updatedAt")
PROFILE_FIELDS: tuple[str, ...] = (
    "firstName",
    "lastName",
    "mobileNumber",
    "address",
    "profilePicture",
    "profilePicturePublicId",
)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _strip(document: Mapping[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    return {key: value for key, value in document.items() if key not in fields}


class Repository:
    def __init__(self, session: Session):
        self.session = session
        self.settings = get_settings()

    def _commit_resume(self, resume: Resume) -> Resume:
        try:
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            logger.warning("Concurrent write to resume %s rejected", resume.id)
            raise VersionConflictError(resume.id) from exc
        self.session.refresh(resume)
        return resume

    # Users

    def create_user(self, body: Mapping[str, Any], role: str = "user") -> User:
        document = validate_create("user", convert("user", body))
        if self.get_user_by_email(document["email"]):
            raise DocumentValidationError([FieldError("email", "is already registered")])

        password = document.pop("password")
        document.update(role=role, isEmailVerified=False, isActive=True, lastLogin=None)
        user = User(password_hash=hash_password(password, self.settings.bcrypt_rounds))
        user.apply_document(document)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email.strip().lower()))

    def list_users(self) -> list[User]:
        return list(self.session.scalars(select(User).order_by(User.created_at.desc())).all())

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.get_user_by_email(email)
        if not user or not user.is_active or not verify_password(password, user.password_hash):
            return None
        user.last_login = datetime.now(UTC)
        self.session.commit()
        self.session.refresh(user)
        return user

    def update_profile(self, user: User, body: Mapping[str, Any]) -> User:
        converted = convert("user", body)
        changes = {key: converted[key] for key in PROFILE_FIELDS if key in converted}
        if isinstance(changes.get("address"), Mapping):
            current = user.to_document().get("address") or {}
            changes["address"] = {**current, **changes["address"]}

        user.apply_document(validate_update("user", changes))
        self.session.commit()
        self.session.refresh(user)
        return user

    def set_password(self, user: User, password: str) -> User:
        validate_update("user", {"password": password})
        user.password_hash = hash_password(password, self.settings.bcrypt_rounds)
        user.reset_password_token = None
        user.reset_password_expire = None
        self.session.commit()
        self.session.refresh(user)
        return user

    def set_role(self, email: str, role: str) -> User:
        user = self.get_user_by_email(email)
        if not user:
            raise ValueError(f"user {email} not found")
        user.apply_document(validate_update("user", {"role": role}))
        self.session.commit()
        self.session.refresh(user)
        return user

    def issue_email_verification(self, user: User) -> str:
        token, hashed = generate_token()
        user.email_verification_token = hashed
        user.email_verification_expire = datetime.now(UTC) + timedelta(
            hours=self.settings.email_verification_token_ttl_hours
        )
        self.session.commit()
        return token

    def verify_email(self, token: str) -> User | None:
        user = self.session.scalar(select(User).where(User.email_verification_token == hash_token(token)))
        if not user or _as_utc(user.email_verification_expire) <= datetime.now(UTC):
            return None
        user.is_email_verified = True
        user.email_verification_token = None
        user.email_verification_expire = None
        self.session.commit()
        self.session.refresh(user)
        return user

    def issue_password_reset(self, email: str) -> str | None:
        user = self.get_user_by_email(email)
        if not user:
            return None
        token, hashed = generate_token()
        user.reset_password_token = hashed
        user.reset_password_expire = datetime.now(UTC) + timedelta(minutes=self.settings.reset_password_token_ttl_min)
        self.session.commit()
        return token

    def reset_password(self, token: str, password: str) -> User | None:
        user = self.session.scalar(select(User).where(User.reset_password_token == hash_token(token)))
        if not user or _as_utc(user.reset_password_expire) <= datetime.now(UTC):
            return None
        return self.set_password(user, password)

    def delete_user(self, user_id: str) -> None:
        user = self.get_user(user_id)
        if not user:
            raise ValueError(f"user {user_id} not found")

        for model in ENTRY_MODELS.values():
            self.session.execute(delete(model).where(model.user_id == user_id))
        self.session.execute(delete(Resume).where(Resume.user_id == user_id))
        self.session.execute(update(Template).where(Template.created_by_id == user_id).values(created_by_id=None))
        self.session.delete(user)
        self.session.commit()
        logger.info("Deleted user %s with their resumes and entries", user_id)

    # Resumes

    def create_resume(self, user: User, body: Mapping[str, Any]) -> Resume:
        document = _strip(convert("resume", body), RESUME_PROTECTED_FIELDS)
        document["user"] = ObjectId(user.id)
        document.setdefault("template", self.settings.default_template)
        document = validate_create("resume", document)

        existing = self.session.scalar(select(func.count()).select_from(Resume).where(Resume.user_id == user.id))
        if not existing:
            document["isDefault"] = True

        resume = Resume()
        resume.apply_document(document)
        self.session.add(resume)
        self._increment_template_usage(document["template"])
        self.session.commit()
        self.session.refresh(resume)
        return resume

    def get_resume(self, resume_id: str) -> Resume | None:
        return self.session.get(Resume, resume_id)

    def get_user_resume(self, user_id: str, resume_id: str) -> Resume | None:
        resume = self.get_resume(resume_id)
        if not resume or resume.user_id != user_id:
            return None
        return resume

    def list_resumes(
        self,
        user_id: str | None = None,
        status: str | None = None,
        approval_status: str | None = None,
        template: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> tuple[list[Resume], int]:
        query = select(Resume)
        if user_id:
            query = query.where(Resume.user_id == user_id)
        if status:
            query = query.where(Resume.status == status)
        if approval_status:
            query = query.where(Resume.admin_approval["status"].as_string() == approval_status)
        if template:
            query = query.where(Resume.template == template)

        total = self.session.scalar(select(func.count()).select_from(query.subquery())) or 0
        size = min(limit or self.settings.default_page_size, self.settings.max_page_size)
        offset = (max(page, 1) - 1) * size
        rows = self.session.scalars(query.order_by(Resume.created_at.desc()).offset(offset).limit(size)).all()
        return list(rows), total

    def update_resume(
        self,
        resume: Resume,
        update_payload: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Resume:
        ensure_expected_version(resume.id, resume.version, expected_version)

        payload = normalize_update_screenshots(update_payload)
        changes = apply_update(resume.to_document(), payload, default=partial(field_default, "resume"))
        changes = _strip(changes, RESUME_PROTECTED_FIELDS)
        if "user" in changes:
            if str(changes.pop("user")) != resume.user_id:
                raise DocumentValidationError([FieldError("user", "cannot be changed")])

        cleaned = validate_update("resume", convert("resume", changes))
        resume.apply_document(cleaned)
        return self._commit_resume(resume)

    def duplicate_resume(self, resume: Resume) -> Resume:
        document = _strip(resume.to_document(), RESUME_PROTECTED_FIELDS)
        document.update(title=f"{document['title']} (Copy)", status="draft", isDefault=False)
        document = validate_create("resume", document)

        duplicate = Resume()
        duplicate.apply_document(document)
        self.session.add(duplicate)
        self.session.commit()
        self.session.refresh(duplicate)
        return duplicate

    def approve_resume(self, resume: Resume, reviewer: User, status: str, comments: str | None = None) -> Resume:
        approval = {
            "status": status,
            "reviewedBy": ObjectId(reviewer.id),
            "reviewedAt": datetime.now(UTC),
            "comments": comments,
        }
        resume.apply_document(validate_update("resume", {"status": status, "adminApproval": approval}))
        logger.info("Resume %s %s by %s", resume.id, status, reviewer.id)
        return self._commit_resume(resume)

    def delete_resume(self, resume: Resume) -> None:
        for model in ENTRY_MODELS.values():
            self.session.execute(delete(model).where(model.resume_id == resume.id))
        self.session.delete(resume)
        self.session.commit()

    def resume_history(self, resume: Resume) -> dict[str, Any]:
        document = resume.to_document()
        return {
            "resumeId": resume.id,
            "version": document["version"],
            "previousVersions": document["previousVersions"],
        }

    # Standalone resume entries

    def _entry_model(self, kind: StandaloneKind) -> type[Hobby | Skill | SocialMedia | Language | Certification]:
        model = ENTRY_MODELS.get(kind)
        if model is None:
            raise ValueError(f"unsupported entry kind '{kind}'")
        return model

    def _check_references(self, document: Mapping[str, Any]) -> None:
        errors: list[FieldError] = []
        user_id = str(document["user"])
        resume_id = str(document["resume"])

        if not self.get_user(user_id):
            errors.append(FieldError("user", "does not reference an existing user"))
        resume = self.get_resume(resume_id)
        if not resume:
            errors.append(FieldError("resume", "does not reference an existing resume"))
        elif resume.user_id != user_id:
            errors.append(FieldError("resume", "belongs to another user"))

        if errors:
            raise DocumentValidationError(errors)

    def create_entry(self, kind: StandaloneKind, user: User, body: Mapping[str, Any]) -> Any:
        model = self._entry_model(kind)
        document = _strip(convert(kind, body), ENTRY_PROTECTED_FIELDS)
        document["user"] = ObjectId(user.id)
        document = validate_create(kind, document)
        self._check_references(document)

        entry = model()
        entry.apply_document(document)
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_entry(self, kind: StandaloneKind, entry_id: str) -> Any:
        return self.session.get(self._entry_model(kind), entry_id)

    def list_entries(self, kind: StandaloneKind, user_id: str, resume_id: str | None = None) -> list[Any]:
        model = self._entry_model(kind)
        query = select(model).where(model.user_id == user_id)
        if resume_id:
            query = query.where(model.resume_id == resume_id)
        return list(self.session.scalars(query.order_by(model.created_at.asc())).all())

    def update_entry(self, kind: StandaloneKind, entry: Any, body: Mapping[str, Any]) -> Any:
        changes = _strip(convert(kind, body), ENTRY_PROTECTED_FIELDS)
        cleaned = validate_update(kind, changes)
        if "resume" in cleaned:
            self._check_references({"user": entry.user_id, "resume": cleaned["resume"]})

        entry.apply_document(cleaned)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def delete_entry(self, entry: Any) -> None:
        self.session.delete(entry)
        self.session.commit()

    # Templates

    def _check_template_unique(self, document: Mapping[str, Any], exclude_id: str | None = None) -> None:
        errors: list[FieldError] = []
        for key, column in (("name", Template.name), ("slug", Template.slug)):
            if key not in document:
                continue
            query = select(Template.id).where(column == document[key])
            if exclude_id:
                query = query.where(Template.id != exclude_id)
            if self.session.scalar(query):
                errors.append(FieldError(key, "is already taken"))
        if errors:
            raise DocumentValidationError(errors)

    def create_template(self, body: Mapping[str, Any], creator: User | None = None) -> Template:
        document = _strip(convert("template", body), TEMPLATE_PROTECTED_FIELDS)
        if creator is not None:
            document["createdBy"] = ObjectId(creator.id)
        document = validate_create("template", document)
        self._check_template_unique(document)

        template = Template()
        template.apply_document(document)
        self.session.add(template)
        self.session.commit()
        self.session.refresh(template)
        return template

    def get_template(self, id_or_slug: str) -> Template | None:
        if is_object_id(id_or_slug):
            template = self.session.get(Template, id_or_slug)
            if template:
                return template
        return self.session.scalar(select(Template).where(Template.slug == id_or_slug.lower()))

    def list_templates(self, category: str | None = None, include_inactive: bool = False) -> list[Template]:
        query = select(Template)
        if not include_inactive:
            query = query.where(Template.is_active.is_(True))
        if category:
            query = query.where(Template.category == category)
        return list(self.session.scalars(query.order_by(Template.name.asc())).all())

    def popular_templates(self, limit: int = 10) -> list[Template]:
        query = (
            select(Template)
            .where(Template.is_active.is_(True))
            .order_by(Template.usage_count.desc(), Template.rating_average.desc())
            .limit(limit)
        )
        return list(self.session.scalars(query).all())

    def templates_by_category(self, category: str, limit: int = 20) -> list[Template]:
        query = (
            select(Template)
            .where(Template.category == category, Template.is_active.is_(True))
            .order_by(Template.usage_count.desc())
            .limit(limit)
        )
        return list(self.session.scalars(query).all())

    def update_template(self, template: Template, body: Mapping[str, Any]) -> Template:
        changes = _strip(convert("template", body), TEMPLATE_PROTECTED_FIELDS)
        cleaned = validate_update("template", changes)
        self._check_template_unique(cleaned, exclude_id=template.id)

        template.apply_document(cleaned)
        self.session.commit()
        self.session.refresh(template)
        return template

    def delete_template(self, template: Template) -> None:
        self.session.delete(template)
        self.session.commit()

    def rate_template(self, template: Template, rating: float) -> Template:
        total = template.rating_average * template.rating_count + rating
        template.rating_count += 1
        template.rating_average = total / template.rating_count
        self.session.commit()
        self.session.refresh(template)
        return template

    def _increment_template_usage(self, slug: str) -> None:
        template = self.session.scalar(select(Template).where(Template.slug == slug))
        if template:
            template.usage_count += 1


def serialize(record: Any) -> dict[str, Any]:
    return encode_document(record.to_document(include_meta=True))
