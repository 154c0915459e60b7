from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resumeforge.api.deps import get_current_user, get_db, require_admin
from resumeforge.api.schemas import RatingRequest
from resumeforge.db.models import Template, User
from resumeforge.db.repositories import Repository, serialize

router = APIRouter(prefix="/templates", tags=["templates"])


def _template_or_404(repo: Repository, id_or_slug: str) -> Template:
    template = repo.get_template(id_or_slug)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("")
def list_templates(category: str | None = Query(None), db: Session = Depends(get_db)) -> list[dict]:
    return [serialize(row) for row in Repository(db).list_templates(category=category)]


@router.get("/popular")
def popular_templates(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)) -> list[dict]:
    return [serialize(row) for row in Repository(db).popular_templates(limit=limit)]


@router.get("/category/{category}")
def templates_by_category(
    category: str,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[dict]:
    return [serialize(row) for row in Repository(db).templates_by_category(category, limit=limit)]


@router.get("/{id_or_slug}")
def get_template(id_or_slug: str, db: Session = Depends(get_db)) -> dict:
    return serialize(_template_or_404(Repository(db), id_or_slug))


@router.post("", status_code=201)
def create_template(
    payload: dict[str, Any] = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    return serialize(Repository(db).create_template(payload, creator=admin))


@router.put("/{template_id}")
def update_template(
    template_id: str,
    payload: dict[str, Any] = Body(...),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    return serialize(repo.update_template(_template_or_404(repo, template_id), payload))


@router.delete("/{template_id}")
def delete_template(template_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)) -> dict:
    repo = Repository(db)
    repo.delete_template(_template_or_404(repo, template_id))
    return {"success": True}


@router.post("/{template_id}/rate")
def rate_template(
    template_id: str,
    payload: RatingRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    repo = Repository(db)
    return serialize(repo.rate_template(_template_or_404(repo, template_id), payload.rating))
