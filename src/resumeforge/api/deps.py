from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from resumeforge.db.models import User
from resumeforge.db.session import get_db_session
from resumeforge.types import ADMIN_ROLES


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_current_user(
    x_user_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    # Token verification happens upstream; the gateway forwards the resolved user id.
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized")
    user = db.get(User, x_user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Not authorized")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
