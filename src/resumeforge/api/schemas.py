from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from resumeforge.types import ReviewDecision


class ApprovalRequest(BaseModel):
    status: ReviewDecision
    comments: str | None = Field(default=None, max_length=500)


class RatingRequest(BaseModel):
    rating: float = Field(ge=1, le=5)


class PasswordResetRequest(BaseModel):
    email: str


class NewPasswordRequest(BaseModel):
    password: str


class PageResponse(BaseModel):
    items: list[dict[str, Any]]
    total: int
    page: int
    limit: int


class VersionHistoryResponse(BaseModel):
    resumeId: str
    version: int
    previousVersions: list[dict[str, Any]]
