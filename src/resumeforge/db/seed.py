from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from resumeforge.core.converters import convert
from resumeforge.core.validation import validate_create
from resumeforge.db.models import Template

logger = logging.getLogger(__name__)

_SECTIONS = (
    "personalInfo",
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "languages",
    "hobbies",
    "socialMedia",
)

DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Modern",
        "slug": "modern",
        "description": "Clean single column layout with accent headings",
        "category": "modern",
        "thumbnail": "/templates/modern/thumbnail.png",
        "preview": "/templates/modern/preview.png",
        "defaultConfig": {
            "colors": {"primary": "#2563eb", "secondary": "#64748b", "accent": "#f59e0b"},
            "fonts": {"heading": "Inter", "body": "Inter"},
            "layout": {"sidebar": False, "twoColumn": False, "compact": False},
        },
        "features": [
            {"name": "Accent colors", "description": "Customizable primary and accent colors"},
            {"name": "Icons", "description": "Section icons next to headings"},
        ],
    },
    {
        "name": "Professional",
        "slug": "professional",
        "description": "Conservative two column layout for corporate roles",
        "category": "professional",
        "thumbnail": "/templates/professional/thumbnail.png",
        "preview": "/templates/professional/preview.png",
        "defaultConfig": {
            "colors": {"primary": "#1f2937", "secondary": "#4b5563", "accent": "#2563eb"},
            "fonts": {"heading": "Georgia", "body": "Inter"},
            "layout": {"sidebar": True, "twoColumn": True, "compact": False},
        },
        "features": [{"name": "Sidebar", "description": "Contact details and skills in a sidebar"}],
    },
    {
        "name": "Creative",
        "slug": "creative",
        "description": "Bold layout with photo and colored header band",
        "category": "creative",
        "thumbnail": "/templates/creative/thumbnail.png",
        "preview": "/templates/creative/preview.png",
        "defaultConfig": {
            "colors": {"primary": "#9333ea", "secondary": "#f472b6", "accent": "#facc15"},
            "fonts": {"heading": "Poppins", "body": "Inter"},
            "layout": {"sidebar": False, "twoColumn": True, "compact": False, "showPhoto": True},
        },
        "features": [{"name": "Photo header", "description": "Profile picture in the header band"}],
    },
    {
        "name": "Classic",
        "slug": "classic",
        "description": "Traditional serif layout suited to academic resumes",
        "category": "classic",
        "thumbnail": "/templates/classic/thumbnail.png",
        "preview": "/templates/classic/preview.png",
        "defaultConfig": {
            "colors": {"primary": "#111827", "secondary": "#374151", "accent": "#6b7280"},
            "fonts": {"heading": "Times New Roman", "body": "Times New Roman"},
            "layout": {"sidebar": False, "twoColumn": False, "compact": True, "showIcons": False},
        },
        "features": [{"name": "Compact spacing", "description": "Fits dense content on one page"}],
    },
]


def seed_default_templates(session: Session) -> int:
    inserted = 0
    for item in DEFAULT_TEMPLATES:
        existing = session.scalar(select(Template).where(Template.slug == item["slug"]))
        if existing:
            continue

        body = {**item, "defaultConfig": {**item["defaultConfig"], "sections": {name: True for name in _SECTIONS}}}
        document = validate_create("template", convert("template", body))
        template = Template()
        template.apply_document(document)
        session.add(template)
        inserted += 1

    session.commit()
    if inserted:
        logger.info("Seeded %s default templates", inserted)
    return inserted
