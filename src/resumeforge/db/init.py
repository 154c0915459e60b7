from __future__ import annotations

from pathlib import Path

from resumeforge.config import get_settings
from resumeforge.db.base import Base
from resumeforge.db.session import SessionLocal, engine
from resumeforge.db import models  # noqa: F401
from resumeforge.db.seed import seed_default_templates


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir]
    database_path = _sqlite_path(settings.database_url)
    if database_path is not None:
        paths.append(database_path.parent)
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def _sqlite_path(database_url: str) -> Path | None:
    prefix = "sqlite:///"
    if not database_url.startswith(prefix) or database_url.endswith(":memory:"):
        return None
    return Path(database_url[len(prefix) :])


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_default_templates(session)
    return {"seeded_templates": inserted}
