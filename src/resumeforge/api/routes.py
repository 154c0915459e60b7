from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resumeforge.api.admin import router as admin_router
from resumeforge.api.deps import get_current_user, get_db
from resumeforge.api.entries import router as entries_router
from resumeforge.api.schemas import NewPasswordRequest, PageResponse, PasswordResetRequest, VersionHistoryResponse
from resumeforge.api.templates import router as templates_router
from resumeforge.db.models import Resume, User
from resumeforge.db.repositories import Repository, serialize
from resumeforge.types import encode_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _owned_resume(repo: Repository, user: User, resume_id: str) -> Resume:
    resume = repo.get_user_resume(user.id, resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


@router.post("/users", status_code=201)
def register_user(payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)) -> dict:
    repo = Repository(db)
    user = repo.create_user(payload)
    repo.issue_email_verification(user)
    logger.info("Registered user %s", user.id)
    return serialize(user)


@router.get("/users/me")
def get_me(user: User = Depends(get_current_user)) -> dict:
    return serialize(user)


@router.put("/users/me")
def update_me(
    payload: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    return serialize(repo.update_profile(user, payload))


@router.delete("/users/me")
def delete_me(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    Repository(db).delete_user(user.id)
    return {"success": True}


@router.post("/users/verify-email/{token}")
def verify_email(token: str, db: Session = Depends(get_db)) -> dict:
    user = Repository(db).verify_email(token)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    return serialize(user)


@router.post("/users/forgot-password")
def forgot_password(payload: PasswordResetRequest, db: Session = Depends(get_db)) -> dict:
    token = Repository(db).issue_password_reset(payload.email)
    if token:
        logger.info("Password reset requested for %s", payload.email)
    return {"success": True}


@router.put("/users/reset-password/{token}")
def reset_password(token: str, payload: NewPasswordRequest, db: Session = Depends(get_db)) -> dict:
    user = Repository(db).reset_password(token, payload.password)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired token")
    return {"success": True}


@router.get("/resumes", response_model=PageResponse)
def list_resumes(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    status: str | None = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PageResponse:
    repo = Repository(db)
    rows, total = repo.list_resumes(user_id=user.id, status=status, page=page, limit=limit)
    return PageResponse(
        items=[serialize(row) for row in rows],
        total=total,
        page=page,
        limit=min(limit or repo.settings.default_page_size, repo.settings.max_page_size),
    )


@router.post("/resumes", status_code=201)
def create_resume(
    payload: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    return serialize(repo.create_resume(user, payload))


@router.get("/resumes/{resume_id}")
def get_resume(resume_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    return serialize(_owned_resume(Repository(db), user, resume_id))


@router.put("/resumes/{resume_id}")
def update_resume(
    resume_id: str,
    payload: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    resume = _owned_resume(repo, user, resume_id)
    update = dict(payload)
    expected_version = update.pop("expectedVersion", None)
    if expected_version is not None and not isinstance(expected_version, int):
        raise HTTPException(status_code=400, detail="expectedVersion must be an integer")
    return serialize(repo.update_resume(resume, update, expected_version=expected_version))


@router.delete("/resumes/{resume_id}")
def delete_resume(resume_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    repo = Repository(db)
    repo.delete_resume(_owned_resume(repo, user, resume_id))
    return {"success": True}


@router.post("/resumes/{resume_id}/duplicate", status_code=201)
def duplicate_resume(
    resume_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    return serialize(repo.duplicate_resume(_owned_resume(repo, user, resume_id)))


@router.get("/resumes/{resume_id}/versions", response_model=VersionHistoryResponse)
def resume_versions(
    resume_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> VersionHistoryResponse:
    repo = Repository(db)
    history = repo.resume_history(_owned_resume(repo, user, resume_id))
    return VersionHistoryResponse.model_validate(encode_document(history))


router.include_router(entries_router)
router.include_router(templates_router)
router.include_router(admin_router)
