from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resumeforge.api.deps import get_current_user, get_db
from resumeforge.db.models import User
from resumeforge.db.repositories import Repository, serialize
from resumeforge.types import StandaloneKind

router = APIRouter(tags=["entries"])

ENTRY_COLLECTIONS: dict[str, StandaloneKind] = {
    "hobbies": "hobby",
    "skills": "skill",
    "social-media": "socialMedia",
    "languages": "language",
    "certifications": "certification",
}


def _owned_entry(repo: Repository, kind: StandaloneKind, user: User, entry_id: str) -> Any:
    entry = repo.get_entry(kind, entry_id)
    if not entry or entry.user_id != user.id:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


def _register(collection: str, kind: StandaloneKind) -> None:
    @router.get(f"/{collection}", name=f"list_{kind}")
    def list_entries(
        resume: str | None = Query(None),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> list[dict]:
        rows = Repository(db).list_entries(kind, user.id, resume_id=resume)
        return [serialize(row) for row in rows]

    @router.post(f"/{collection}", status_code=201, name=f"create_{kind}")
    def create_entry(
        payload: dict[str, Any] = Body(...),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> dict:
        return serialize(Repository(db).create_entry(kind, user, payload))

    @router.get(f"/{collection}/{{entry_id}}", name=f"get_{kind}")
    def get_entry(entry_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
        return serialize(_owned_entry(Repository(db), kind, user, entry_id))

    @router.put(f"/{collection}/{{entry_id}}", name=f"update_{kind}")
    def update_entry(
        entry_id: str,
        payload: dict[str, Any] = Body(...),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> dict:
        repo = Repository(db)
        entry = _owned_entry(repo, kind, user, entry_id)
        return serialize(repo.update_entry(kind, entry, payload))

    @router.delete(f"/{collection}/{{entry_id}}", name=f"delete_{kind}")
    def delete_entry(entry_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
        repo = Repository(db)
        repo.delete_entry(_owned_entry(repo, kind, user, entry_id))
        return {"success": True}


for _collection, _kind in ENTRY_COLLECTIONS.items():
    _register(_collection, _kind)
