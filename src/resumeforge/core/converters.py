from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from resumeforge.core.coercion import (
    COORDINATE_PATHS,
    apply_coercion,
    to_array,
    to_datetime,
    to_float,
    to_object_id,
)
from resumeforge.core.screenshots import normalize_project_screenshots
from resumeforge.types import EntityKind


@dataclass(frozen=True, slots=True)
class ConversionPlan:
    date_paths: tuple[str, ...] = ()
    number_paths: tuple[str, ...] = ()
    object_id_paths: tuple[str, ...] = ()
    array_paths: tuple[str, ...] = ()
    coordinates: bool = False
    screenshots: bool = False
    drop_fields: tuple[str, ...] = ()


RESUME_PLAN = ConversionPlan(
    date_paths=(
        "startDate",
        "endDate",
        "personalInfo.startDate",
        "personalInfo.endDate",
        "education.startDate",
        "education.endDate",
        "experiences.startDate",
        "experiences.endDate",
        "projects.startDate",
        "projects.endDate",
        "projects.screenshots.uploadedAt",
        "certifications.issueDate",
        "certifications.expiryDate",
        "adminApproval.reviewedAt",
        "previousVersions.createdAt",
    ),
    number_paths=("education.gpa", "version"),
    object_id_paths=("user", "adminApproval.reviewedBy"),
    array_paths=(
        "education",
        "experiences",
        "projects",
        "skills",
        "hobbies",
        "socialMedia",
        "languages",
        "certifications",
        "previousVersions",
    ),
    coordinates=True,
    screenshots=True,
    drop_fields=("_id",),
)

USER_PLAN = ConversionPlan(
    date_paths=("emailVerificationExpire", "resetPasswordExpire", "lastLogin"),
    coordinates=True,
)

HOBBY_PLAN = ConversionPlan(object_id_paths=("user", "resume"))

SKILL_PLAN = ConversionPlan(
    number_paths=("yearsOfExperience",),
    object_id_paths=("user", "resume"),
)

SOCIAL_MEDIA_PLAN = ConversionPlan(
    number_paths=("followers",),
    object_id_paths=("user", "resume"),
)

LANGUAGE_PLAN = ConversionPlan(
    date_paths=("certification.issueDate", "certification.expiryDate"),
    object_id_paths=("user", "resume"),
)

CERTIFICATION_PLAN = ConversionPlan(
    date_paths=("issueDate", "expiryDate"),
    object_id_paths=("user", "resume"),
)

TEMPLATE_PLAN = ConversionPlan(
    number_paths=("usageCount", "rating.average", "rating.count"),
    object_id_paths=("createdBy",),
)

ENTITY_PLANS: Mapping[EntityKind, ConversionPlan] = MappingProxyType(
    {
        "resume": RESUME_PLAN,
        "user": USER_PLAN,
        "hobby": HOBBY_PLAN,
        "skill": SKILL_PLAN,
        "socialMedia": SOCIAL_MEDIA_PLAN,
        "language": LANGUAGE_PLAN,
        "certification": CERTIFICATION_PLAN,
        "template": TEMPLATE_PLAN,
    }
)


def get_plan(kind: EntityKind) -> ConversionPlan:
    plan = ENTITY_PLANS.get(kind)
    if plan is None:
        raise ValueError(f"Unknown entity kind {kind}")
    return plan


def convert_document(body: Mapping[str, Any], plan: ConversionPlan) -> dict[str, Any]:
    document = copy.deepcopy(dict(body))
    for field in plan.drop_fields:
        document.pop(field, None)

    apply_coercion(document, plan.date_paths, to_datetime)
    apply_coercion(document, plan.number_paths, to_float)
    apply_coercion(document, plan.object_id_paths, to_object_id)
    apply_coercion(document, plan.array_paths, to_array)
    if plan.coordinates:
        apply_coercion(document, COORDINATE_PATHS, to_float)
    if plan.screenshots and "projects" in document:
        document["projects"] = normalize_project_screenshots(document["projects"])
    return document


def convert(kind: EntityKind, body: Mapping[str, Any]) -> dict[str, Any]:
    return convert_document(body, get_plan(kind))
