from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resumeforge.api.deps import get_db, require_admin
from resumeforge.api.schemas import ApprovalRequest, PageResponse
from resumeforge.db.models import Resume, User
from resumeforge.db.repositories import Repository, serialize

router = APIRouter(prefix="/admin", tags=["admin"])


def _resume_or_404(repo: Repository, resume_id: str) -> Resume:
    resume = repo.get_resume(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


@router.get("/resumes", response_model=PageResponse)
def list_resumes(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    status: str | None = Query(None),
    approval_status: str | None = Query(None, alias="approvalStatus"),
    template: str | None = Query(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PageResponse:
    repo = Repository(db)
    rows, total = repo.list_resumes(
        status=status,
        approval_status=approval_status,
        template=template,
        page=page,
        limit=limit,
    )
    return PageResponse(
        items=[serialize(row) for row in rows],
        total=total,
        page=page,
        limit=min(limit or repo.settings.default_page_size, repo.settings.max_page_size),
    )


@router.put("/resumes/{resume_id}/approve")
def approve_resume(
    resume_id: str,
    payload: ApprovalRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    resume = _resume_or_404(repo, resume_id)
    return serialize(repo.approve_resume(resume, admin, payload.status, payload.comments))


@router.delete("/resumes/{resume_id}")
def delete_resume(resume_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)) -> dict:
    repo = Repository(db)
    repo.delete_resume(_resume_or_404(repo, resume_id))
    return {"success": True}


@router.get("/users")
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)) -> list[dict]:
    return [serialize(row) for row in Repository(db).list_users()]


@router.delete("/users/{user_id}")
def delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)) -> dict:
    try:
        Repository(db).delete_user(user_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"success": True}
