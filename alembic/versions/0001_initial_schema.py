"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ENTRY_TABLES = ("hobbies", "skills", "social_media", "languages", "certifications")


def _id() -> sa.Column:
    return sa.Column("id", sa.String(24), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _entry_refs() -> list[sa.Column]:
    return [
        sa.Column("user_id", sa.String(24), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("resume_id", sa.String(24), sa.ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("address", sa.JSON(), nullable=False),
        sa.Column("mobile_number", sa.String(20), nullable=False),
        sa.Column("profile_picture", sa.String(500), nullable=True),
        sa.Column("profile_picture_public_id", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("email_verification_token", sa.String(64), nullable=True),
        sa.Column("email_verification_expire", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_password_token", sa.String(64), nullable=True),
        sa.Column("reset_password_expire", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_email_verification_token", "users", ["email_verification_token"])
    op.create_index("ix_users_reset_password_token", "users", ["reset_password_token"])

    op.create_table(
        "resumes",
        _id(),
        sa.Column("user_id", sa.String(24), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("template", sa.String(50), nullable=False),
        sa.Column("template_config", sa.JSON(), nullable=False),
        sa.Column("personal_info", sa.JSON(), nullable=False),
        sa.Column("education", sa.JSON(), nullable=False),
        sa.Column("experiences", sa.JSON(), nullable=False),
        sa.Column("projects", sa.JSON(), nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("hobbies", sa.JSON(), nullable=False),
        sa.Column("social_media", sa.JSON(), nullable=False),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("certifications", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("previous_versions", sa.JSON(), nullable=False),
        sa.Column("admin_approval", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_resumes_user_id", "resumes", ["user_id"])
    op.create_index("ix_resumes_status", "resumes", ["status"])

    op.create_table(
        "hobbies",
        _id(),
        *_entry_refs(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "skills",
        _id(),
        *_entry_refs(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("level", sa.String(30), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("years_of_experience", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "social_media",
        _id(),
        *_entry_refs(),
        sa.Column("platform", sa.String(50), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("username", sa.String(120), nullable=True),
        sa.Column("followers", sa.Integer(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "languages",
        _id(),
        *_entry_refs(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("proficiency", sa.String(20), nullable=False),
        sa.Column("is_native", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("certification", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_languages_name", "languages", ["name"])
    op.create_table(
        "certifications",
        _id(),
        *_entry_refs(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("issuer", sa.String(100), nullable=False),
        sa.Column("issue_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("credential_id", sa.String(100), nullable=True),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("level", sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_certifications_issuer", "certifications", ["issuer"])
    for table in ENTRY_TABLES:
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_resume_id", table, ["resume_id"])

    op.create_table(
        "templates",
        _id(),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("slug", sa.String(80), nullable=False),
        sa.Column("description", sa.String(200), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=False),
        sa.Column("preview", sa.String(500), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("default_config", sa.JSON(), nullable=False),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("rating_average", sa.Float(), nullable=False),
        sa.Column("rating_count", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.String(24), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_templates_slug", "templates", ["slug"], unique=True)
    op.create_index("ix_templates_category", "templates", ["category"])
    op.create_index("ix_templates_is_active", "templates", ["is_active"])


def downgrade() -> None:
    op.drop_table("templates")
    for table in reversed(ENTRY_TABLES):
        op.drop_table(table)
    op.drop_table("resumes")
    op.drop_table("users")
