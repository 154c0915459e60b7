from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

_TEST_DIR = Path(tempfile.mkdtemp(prefix="resumeforge-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'resumeforge.db'}"
os.environ["DATA_DIR"] = str(_TEST_DIR)
os.environ["APP_ENV"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from resumeforge.api.app import create_app  # noqa: E402
from resumeforge.db.base import Base  # noqa: E402
from resumeforge.db.models import User  # noqa: E402
from resumeforge.db.repositories import Repository  # noqa: E402
from resumeforge.db.seed import seed_default_templates  # noqa: E402
from resumeforge.db.session import SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db() -> Iterator[None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_default_templates(session)
    yield


@pytest.fixture
def db() -> Iterator[Session]:
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def user_payload() -> Callable[..., dict[str, Any]]:
    def build(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "password": "analytical",
            "mobileNumber": "+441234567890",
            "address": {
                "street": "12 St James's Square",
                "city": "London",
                "state": "Greater London",
                "country": "UK",
                "zipCode": "SW1Y 4JH",
                "coordinates": {"lat": "51.5074", "lng": "-0.1340"},
            },
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def resume_payload() -> Callable[..., dict[str, Any]]:
    def build(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": "Backend Engineer",
            "template": "modern",
            "personalInfo": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "phone": "+441234567890",
                "address": {"city": "London", "coordinates": {"lat": "51.5", "lng": "-0.12"}},
            },
            "education": [
                {
                    "institution": "University of London",
                    "degree": "BSc",
                    "field": "Mathematics",
                    "startDate": "2010-09-01",
                    "endDate": "2013-06-30",
                    "gpa": "3.8",
                }
            ],
            "experiences": [
                {
                    "company": "Analytical Engines Ltd",
                    "role": "Engineer",
                    "startDate": "2014-01-15",
                    "description": "Designed programs for the engine",
                    "achievements": ["First published algorithm"],
                    "technologies": ["Python", "SQL"],
                }
            ],
            "projects": [
                {
                    "name": "Note G",
                    "description": "Bernoulli number computation",
                    "githubUrl": "https://github.com/ada/note-g",
                    "screenshots": ["https://img.example.com/a.png"],
                }
            ],
            "skills": [{"name": "Mathematics", "level": "expert"}],
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def make_user(db: Session, user_payload: Callable[..., dict[str, Any]]) -> Callable[..., User]:
    def build(role: str = "user", **overrides: Any) -> User:
        return Repository(db).create_user(user_payload(**overrides), role=role)

    return build


def auth_headers(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def headers() -> Callable[[str], dict[str, str]]:
    return auth_headers
