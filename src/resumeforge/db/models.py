from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resumeforge.db.base import Base, DocumentMixin, TimestampMixin


class User(DocumentMixin, TimestampMixin, Base):
    __tablename__ = "users"
    __entity_kind__ = "user"
    __document_fields__ = {
        "firstName": "first_name",
        "lastName": "last_name",
        "email": "email",
        "address": "address",
        "mobileNumber": "mobile_number",
        "profilePicture": "profile_picture",
        "profilePicturePublicId": "profile_picture_public_id",
        "role": "role",
        "isEmailVerified": "is_email_verified",
        "isActive": "is_active",
        "lastLogin": "last_login",
    }

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    mobile_number: Mapped[str] = mapped_column(String(20), nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)
    profile_picture_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False)
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    email_verification_token: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    email_verification_expire: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reset_password_token: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    reset_password_expire: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Resume(DocumentMixin, TimestampMixin, Base):
    __tablename__ = "resumes"
    __entity_kind__ = "resume"
    __document_fields__ = {
        "user": "user_id",
        "title": "title",
        "template": "template",
        "templateConfig": "template_config",
        "personalInfo": "personal_info",
        "education": "education",
        "experiences": "experiences",
        "projects": "projects",
        "skills": "skills",
        "hobbies": "hobbies",
        "socialMedia": "social_media",
        "languages": "languages",
        "certifications": "certifications",
        "status": "status",
        "isPublic": "is_public",
        "isDefault": "is_default",
        "description": "description",
        "tags": "tags",
        "version": "version",
        "previousVersions": "previous_versions",
        "adminApproval": "admin_approval",
    }

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False, active_history=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False, active_history=True)
    template: Mapped[str] = mapped_column(String(50), default="modern", nullable=False, active_history=True)
    template_config: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False, active_history=True)
    personal_info: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False, active_history=True)
    education: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    experiences: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    projects: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    skills: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    hobbies: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    social_media: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    languages: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    certifications: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True, nullable=False, active_history=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, active_history=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, active_history=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True, active_history=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False, active_history=True)
    previous_versions: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False, active_history=True)
    admin_approval: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False, active_history=True)

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}


class ResumeEntryMixin(DocumentMixin, TimestampMixin):
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    resume_id: Mapped[str] = mapped_column(ForeignKey("resumes.id", ondelete="CASCADE"), index=True, nullable=False)


class Hobby(ResumeEntryMixin, Base):
    __tablename__ = "hobbies"
    __entity_kind__ = "hobby"
    __document_fields__ = {
        "user": "user_id",
        "resume": "resume_id",
        "name": "name",
        "description": "description",
    }

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)


class Skill(ResumeEntryMixin, Base):
    __tablename__ = "skills"
    __entity_kind__ = "skill"
    __document_fields__ = {
        "user": "user_id",
        "resume": "resume_id",
        "name": "name",
        "level": "level",
        "category": "category",
        "yearsOfExperience": "years_of_experience",
    }

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    level: Mapped[str] = mapped_column(String(30), default="intermediate", nullable=False)
    category: Mapped[str] = mapped_column(String(30), default="technical", nullable=False)
    years_of_experience: Mapped[float | None] = mapped_column(Float, nullable=True)


class SocialMedia(ResumeEntryMixin, Base):
    __tablename__ = "social_media"
    __entity_kind__ = "socialMedia"
    __document_fields__ = {
        "user": "user_id",
        "resume": "resume_id",
        "platform": "platform",
        "url": "url",
        "username": "username",
        "followers": "followers",
        "isPublic": "is_public",
    }

    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    username: Mapped[str | None] = mapped_column(String(120), nullable=True)
    followers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Language(ResumeEntryMixin, Base):
    __tablename__ = "languages"
    __entity_kind__ = "language"
    __document_fields__ = {
        "user": "user_id",
        "resume": "resume_id",
        "name": "name",
        "proficiency": "proficiency",
        "isNative": "is_native",
        "isActive": "is_active",
        "certification": "certification",
    }

    name: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    proficiency: Mapped[str] = mapped_column(String(20), default="conversational", nullable=False)
    is_native: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    certification: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class Certification(ResumeEntryMixin, Base):
    __tablename__ = "certifications"
    __entity_kind__ = "certification"
    __document_fields__ = {
        "user": "user_id",
        "resume": "resume_id",
        "name": "name",
        "issuer": "issuer",
        "issueDate": "issue_date",
        "expiryDate": "expiry_date",
        "credentialId": "credential_id",
        "url": "url",
        "isActive": "is_active",
        "isVerified": "is_verified",
        "category": "category",
        "level": "level",
    }

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    issuer: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    issue_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    credential_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category: Mapped[str] = mapped_column(String(20), default="technical", nullable=False)
    level: Mapped[str] = mapped_column(String(20), default="intermediate", nullable=False)


class Template(DocumentMixin, TimestampMixin, Base):
    __tablename__ = "templates"
    __entity_kind__ = "template"
    __document_fields__ = {
        "name": "name",
        "slug": "slug",
        "description": "description",
        "category": "category",
        "thumbnail": "thumbnail",
        "preview": "preview",
        "isActive": "is_active",
        "isPremium": "is_premium",
        "defaultConfig": "default_config",
        "features": "features",
        "usageCount": "usage_count",
        "createdBy": "created_by_id",
    }

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(80), unique=True, index=True, nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(20), default="professional", index=True, nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    preview: Mapped[str] = mapped_column(String(500), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True, nullable=False)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    default_config: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    features: Mapped[list[Any]] = mapped_column(JSON, default=list, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_average: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    rating_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    def storage_document(self) -> dict[str, Any]:
        document = super().storage_document()
        document["rating"] = {"average": self.rating_average or 0.0, "count": self.rating_count or 0}
        return document

    def apply_document(self, document: Mapping[str, Any]) -> None:
        super().apply_document(document)
        rating = document.get("rating")
        if isinstance(rating, Mapping):
            self.rating_average = float(rating.get("average") or 0.0)
            self.rating_count = int(rating.get("count") or 0)
