from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from resumeforge.types import (
    ApprovalStatus,
    CertificationCategory,
    CertificationLevel,
    LanguageProficiency,
    ObjectIdField,
    ResumeStatus,
    TemplateCategory,
    UserRole,
)

EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
URL_PATTERN = r"^https?://.+"
GITHUB_URL_PATTERN = r"^https?://(www\.)?github\.com/[a-zA-Z0-9-]+/[a-zA-Z0-9._-]+$"

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN)]
Url = Annotated[str, StringConstraints(pattern=URL_PATTERN)]
GithubUrl = Annotated[str, StringConstraints(pattern=GITHUB_URL_PATTERN)]

Name50 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Name100 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Name200 = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
Achievement = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
CredentialId = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
Description = Annotated[str, StringConstraints(min_length=1, max_length=1000)]
LongText = Annotated[str, StringConstraints(max_length=1000)]
Comment = Annotated[str, StringConstraints(max_length=500)]
ShortText = Annotated[str, StringConstraints(max_length=200)]
NonEmpty = Annotated[str, StringConstraints(min_length=1)]


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        arbitrary_types_allowed=True,
    )


# Embedded resume sections


class Coordinates(DocumentModel):
    lat: float | None = None
    lng: float | None = None


class ResumeAddress(DocumentModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip_code: str | None = None
    coordinates: Coordinates | None = None


class PersonalInfo(DocumentModel):
    first_name: RequiredText
    last_name: RequiredText
    email: Annotated[str, StringConstraints(strip_whitespace=True, pattern=EMAIL_PATTERN)]
    phone: NonEmpty
    address: ResumeAddress | None = None
    summary: str | None = None
    profile_picture: str | None = None
    profile_picture_public_id: str | None = None


class Education(DocumentModel):
    institution: RequiredText
    degree: RequiredText
    field: RequiredText
    start_date: datetime
    end_date: datetime | None = None
    gpa: Annotated[float, Field(ge=0, le=4)] | None = None
    description: str | None = None


class Experience(DocumentModel):
    company: Name100
    role: Name100
    start_date: datetime
    end_date: datetime | None = None
    description: Description
    achievements: list[Achievement] = Field(default_factory=list)
    technologies: list[RequiredText] = Field(default_factory=list)


class Screenshot(DocumentModel):
    url: str | None = None
    caption: ShortText | None = None
    public_id: str | None = None
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Project(DocumentModel):
    name: Name100
    description: Description
    technologies: list[RequiredText] = Field(default_factory=list)
    github_url: GithubUrl | None = None
    live_url: Url | None = None
    screenshots: list[Screenshot] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ResumeSkill(DocumentModel):
    name: RequiredText
    level: str = "intermediate"
    category: str = "technical"


class ResumeHobby(DocumentModel):
    name: Name50
    description: ShortText | None = None


class ResumeSocialMedia(DocumentModel):
    platform: NonEmpty
    url: Url
    username: OptionalText | None = None
    is_public: bool = True


class ResumeLanguage(DocumentModel):
    name: RequiredText
    proficiency: str = "conversational"


class ResumeCertification(DocumentModel):
    name: RequiredText
    issuer: RequiredText
    issue_date: datetime
    expiry_date: datetime | None = None
    credential_id: str | None = None
    url: str | None = None


class VersionEntry(DocumentModel):
    version: int
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class AdminApproval(DocumentModel):
    status: ApprovalStatus = "pending"
    reviewed_by: ObjectIdField | None = None
    reviewed_at: datetime | None = None
    comments: Comment | None = None


class ResumeDocument(DocumentModel):
    user: ObjectIdField
    title: Name100
    template: RequiredText = "modern"
    template_config: dict[str, Any] = Field(default_factory=dict)
    personal_info: PersonalInfo
    education: list[Education] = Field(default_factory=list)
    experiences: list[Experience] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    skills: list[ResumeSkill] = Field(default_factory=list)
    hobbies: list[ResumeHobby] = Field(default_factory=list)
    social_media: list[ResumeSocialMedia] = Field(default_factory=list)
    languages: list[ResumeLanguage] = Field(default_factory=list)
    certifications: list[ResumeCertification] = Field(default_factory=list)
    status: ResumeStatus = "draft"
    is_public: bool = False
    is_default: bool = False
    description: LongText | None = None
    tags: list[Tag] = Field(default_factory=list)
    version: int = 1
    previous_versions: list[VersionEntry] = Field(default_factory=list)
    admin_approval: AdminApproval = Field(default_factory=AdminApproval)


# Users


class UserCoordinates(DocumentModel):
    lat: Annotated[float, Field(ge=-90, le=90)] | None = None
    lng: Annotated[float, Field(ge=-180, le=180)] | None = None


class UserAddress(DocumentModel):
    street: RequiredText
    city: RequiredText
    state: RequiredText
    country: RequiredText
    zip_code: RequiredText
    coordinates: UserCoordinates | None = None


class UserDocument(DocumentModel):
    first_name: Name50
    last_name: Name50
    email: Email
    password: Annotated[str, StringConstraints(min_length=6)]
    address: UserAddress
    mobile_number: Annotated[str, StringConstraints(pattern=PHONE_PATTERN)]
    profile_picture: str | None = None
    profile_picture_public_id: str | None = None
    role: UserRole = "user"
    is_email_verified: bool = False
    is_active: bool = True
    last_login: datetime | None = None


# Standalone resume entries


class EntryDocument(DocumentModel):
    user: ObjectIdField
    resume: ObjectIdField


class HobbyDocument(EntryDocument):
    name: Name50
    description: ShortText | None = None


class SkillDocument(EntryDocument):
    name: Name50
    level: str = "intermediate"
    category: str = "technical"
    years_of_experience: Annotated[float, Field(ge=0)] | None = None


class SocialMediaDocument(EntryDocument):
    platform: RequiredText
    url: Url
    username: OptionalText | None = None
    followers: Annotated[int, Field(ge=0)] = 0
    is_public: bool = True


class LanguageCertification(DocumentModel):
    name: str | None = None
    level: str | None = None
    issue_date: datetime | None = None
    expiry_date: datetime | None = None


class LanguageDocument(EntryDocument):
    name: Name50
    proficiency: LanguageProficiency = "conversational"
    is_native: bool = False
    is_active: bool = True
    certification: LanguageCertification | None = None


class CertificationDocument(EntryDocument):
    name: Name200
    issuer: Name100
    issue_date: datetime
    expiry_date: datetime | None = None
    credential_id: CredentialId | None = None
    url: Url | None = None
    is_active: bool = True
    is_verified: bool = False
    category: CertificationCategory = "technical"
    level: CertificationLevel = "intermediate"


# Templates


class TemplateFeature(DocumentModel):
    name: RequiredText
    description: str | None = None
    is_enabled: bool = True


class TemplateRating(DocumentModel):
    average: Annotated[float, Field(ge=0, le=5)] = 0
    count: Annotated[int, Field(ge=0)] = 0


class TemplateDocument(DocumentModel):
    name: Name50
    slug: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1)]
    description: Name200
    category: TemplateCategory = "professional"
    thumbnail: NonEmpty
    preview: NonEmpty
    is_active: bool = True
    is_premium: bool = False
    default_config: dict[str, Any] = Field(default_factory=dict)
    features: list[TemplateFeature] = Field(default_factory=list)
    usage_count: Annotated[int, Field(ge=0)] = 0
    rating: TemplateRating = Field(default_factory=TemplateRating)
    created_by: ObjectIdField | None = None
