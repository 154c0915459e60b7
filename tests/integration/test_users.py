from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from resumeforge.core.errors import DocumentValidationError
from resumeforge.db.repositories import Repository


def test_password_is_hashed_and_authenticates(db, make_user) -> None:
    user = make_user()
    repo = Repository(db)

    assert user.password_hash.startswith("$2b$04$")
    assert "analytical" not in user.password_hash
    assert user.last_login is None

    assert repo.authenticate("ADA@example.com", "wrong") is None
    authenticated = repo.authenticate("ADA@example.com", "analytical")
    assert authenticated is not None
    assert authenticated.last_login is not None


def test_inactive_user_cannot_authenticate(db, make_user) -> None:
    user = make_user()
    user.is_active = False
    db.commit()

    assert Repository(db).authenticate("ada@example.com", "analytical") is None


def test_email_verification_token_flow(db, make_user) -> None:
    repo = Repository(db)
    user = make_user()
    token = repo.issue_email_verification(user)

    assert user.email_verification_token != token
    assert repo.verify_email("bogus") is None

    verified = repo.verify_email(token)
    assert verified.is_email_verified is True
    assert verified.email_verification_token is None
    assert repo.verify_email(token) is None


def test_password_reset_flow(db, make_user) -> None:
    repo = Repository(db)
    user = make_user()

    assert repo.issue_password_reset("nobody@example.com") is None
    token = repo.issue_password_reset("ada@example.com")

    with pytest.raises(DocumentValidationError):
        repo.reset_password(token, "tiny")

    assert repo.reset_password(token, "difference-engine") is not None
    assert repo.authenticate("ada@example.com", "difference-engine") is not None
    assert repo.reset_password(token, "another-one") is None
    assert user.reset_password_token is None


def test_expired_reset_token_is_rejected(db, make_user) -> None:
    repo = Repository(db)
    user = make_user()
    token = repo.issue_password_reset("ada@example.com")
    user.reset_password_expire = datetime.now(UTC) - timedelta(minutes=1)
    db.commit()

    assert repo.reset_password(token, "difference-engine") is None


def test_set_role_validates_role(db, make_user) -> None:
    repo = Repository(db)
    make_user()

    assert repo.set_role("ada@example.com", "super_admin").role == "super_admin"
    with pytest.raises(DocumentValidationError):
        repo.set_role("ada@example.com", "owner")
    with pytest.raises(ValueError):
        repo.set_role("nobody@example.com", "admin")


def test_delete_user_cascades_and_releases_templates(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    user = make_user()
    resume = repo.create_resume(user, resume_payload())
    repo.create_entry("skill", user, {"resume": resume.id, "name": "SQL"})
    template = repo.create_template(
        {
            "name": "Ledger",
            "slug": "ledger",
            "description": "Accountant friendly",
            "category": "classic",
            "thumbnail": "/t.png",
            "preview": "/p.png",
        },
        creator=user,
    )

    repo.delete_user(user.id)
    db.expire_all()

    assert repo.get_user(user.id) is None
    assert repo.get_resume(resume.id) is None
    assert repo.list_entries("skill", user.id) == []
    assert repo.get_template("ledger").created_by_id is None
    assert template.id == repo.get_template("ledger").id
