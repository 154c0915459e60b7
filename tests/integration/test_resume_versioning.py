from __future__ import annotations

import pytest
from sqlalchemy import select

from resumeforge.core.errors import DocumentValidationError, VersionConflictError
from resumeforge.db.models import Resume, Template
from resumeforge.db.repositories import Repository
from resumeforge.db.session import SessionLocal


def test_create_starts_at_version_one_and_normalizes(db, make_user, resume_payload) -> None:
    user = make_user()
    repo = Repository(db)
    resume = repo.create_resume(user, resume_payload(version=7, previousVersions=[{"version": 1}]))

    assert resume.version == 1
    assert resume.previous_versions == []
    assert resume.is_default is True
    assert resume.user_id == user.id

    document = resume.to_document()
    screenshot = document["projects"][0]["screenshots"][0]
    assert screenshot["url"] == "https://img.example.com/a.png"
    assert screenshot["caption"] == ""
    assert document["education"][0]["gpa"] == 3.8
    assert document["personalInfo"]["address"]["coordinates"] == {"lat": 51.5, "lng": -0.12}

    template = db.scalar(select(Template).where(Template.slug == "modern"))
    assert template.usage_count == 1


def test_update_bumps_version_and_snapshots_previous_state(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    repo.update_resume(resume, {"title": "Staff Engineer"})
    assert resume.version == 2
    assert resume.title == "Staff Engineer"
    assert len(resume.previous_versions) == 1
    snapshot = resume.previous_versions[0]
    assert snapshot["version"] == 1
    assert snapshot["data"]["title"] == "Backend Engineer"
    assert "version" not in snapshot["data"]
    assert "previousVersions" not in snapshot["data"]

    repo.update_resume(resume, {"$set": {"personalInfo.summary": "Mathematician"}})
    assert resume.version == 3
    assert [entry["version"] for entry in resume.previous_versions] == [1, 2]
    assert resume.previous_versions[1]["data"]["title"] == "Staff Engineer"


def test_noop_update_keeps_version(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    repo.update_resume(resume, {"title": "Backend Engineer"})
    assert resume.version == 1
    assert resume.previous_versions == []


def test_client_supplied_bookkeeping_is_ignored(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    repo.update_resume(resume, {"title": "Renamed", "version": 40, "previousVersions": []})
    assert resume.version == 2
    assert len(resume.previous_versions) == 1


def test_direct_orm_mutation_is_versioned(db, make_user, resume_payload) -> None:
    resume = Repository(db).create_resume(make_user(), resume_payload())

    resume.tags = ["python"]
    db.commit()
    db.refresh(resume)

    assert resume.version == 2
    assert resume.previous_versions[0]["data"]["tags"] == []


def test_concurrent_writer_gets_version_conflict(db, make_user, resume_payload) -> None:
    resume = Repository(db).create_resume(make_user(), resume_payload())

    with SessionLocal() as other:
        stale = other.get(Resume, resume.id)
        Repository(db).update_resume(resume, {"title": "First writer"})

        with pytest.raises(VersionConflictError):
            Repository(other).update_resume(stale, {"title": "Second writer"})

    db.refresh(resume)
    assert resume.title == "First writer"
    assert resume.version == 2


def test_expected_version_mismatch_rejects_without_writing(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    with pytest.raises(VersionConflictError) as exc_info:
        repo.update_resume(resume, {"title": "Late"}, expected_version=3)

    assert exc_info.value.actual == 1
    db.refresh(resume)
    assert resume.title == "Backend Engineer"
    assert resume.version == 1

    repo.update_resume(resume, {"title": "On time"}, expected_version=1)
    assert resume.version == 2


def test_owner_cannot_be_changed(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    owner = make_user()
    other = make_user(email="grace@example.com")
    resume = repo.create_resume(owner, resume_payload())

    with pytest.raises(DocumentValidationError) as exc_info:
        repo.update_resume(resume, {"user": other.id})
    assert exc_info.value.errors[0].field == "user"


def test_set_projects_normalizes_raw_screenshots(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    project = {"name": "Engine", "description": "Difference engine", "screenshots": ["https://img.example.com/b.png"]}
    repo.update_resume(resume, {"$set": {"projects": [project]}})

    screenshot = resume.to_document()["projects"][0]["screenshots"][0]
    assert screenshot["url"] == "https://img.example.com/b.png"
    assert screenshot["caption"] == ""
    assert screenshot["uploadedAt"] is not None


def test_invalid_update_reports_field_errors(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    with pytest.raises(DocumentValidationError) as exc_info:
        repo.update_resume(resume, {"status": "lost", "title": "x" * 120})

    assert {error.field for error in exc_info.value.errors} == {"status", "title"}
    db.rollback()
    db.refresh(resume)
    assert resume.version == 1


def test_approval_and_duplicate(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    owner = make_user()
    admin = make_user(role="admin", email="admin@example.com")
    resume = repo.create_resume(owner, resume_payload())

    repo.approve_resume(resume, admin, "approved", "Looks good")
    document = resume.to_document()
    assert document["status"] == "approved"
    assert document["adminApproval"]["status"] == "approved"
    assert str(document["adminApproval"]["reviewedBy"]) == admin.id
    assert resume.version == 2

    copy = repo.duplicate_resume(resume)
    assert copy.id != resume.id
    assert copy.title == "Backend Engineer (Copy)"
    assert copy.status == "draft"
    assert copy.is_default is False
    assert copy.version == 1
    assert copy.admin_approval["status"] == "pending"


def test_delete_resume_removes_standalone_entries(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    user = make_user()
    resume = repo.create_resume(user, resume_payload())
    repo.create_entry("hobby", user, {"resume": resume.id, "name": "Chess"})
    repo.create_entry("language", user, {"resume": resume.id, "name": "French", "proficiency": "fluent"})

    repo.delete_resume(resume)

    assert repo.get_resume(resume.id) is None
    assert repo.list_entries("hobby", user.id) == []
    assert repo.list_entries("language", user.id) == []


def test_set_through_list_index_updates_one_element(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    payload = resume_payload()
    payload["projects"].append({"name": "Loom", "description": "Punched cards"})
    resume = repo.create_resume(make_user(), payload)

    repo.update_resume(resume, {"$set": {"projects.0.name": "Renamed"}})

    projects = resume.to_document()["projects"]
    assert [project["name"] for project in projects] == ["Renamed", "Loom"]
    assert projects[0]["screenshots"][0]["url"] == "https://img.example.com/a.png"
    assert resume.version == 2
    assert resume.previous_versions[0]["data"]["projects"][0]["name"] == "Note G"


def test_set_through_scalar_or_missing_element_is_rejected(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    with pytest.raises(DocumentValidationError) as exc_info:
        repo.update_resume(resume, {"$set": {"title.text": "Nested"}})
    assert exc_info.value.errors[0].field == "title.text"
    assert exc_info.value.errors[0].message == "cannot be set through a non-object"

    with pytest.raises(DocumentValidationError) as exc_info:
        repo.update_resume(resume, {"$set": {"projects.5.name": "Ghost"}})
    assert exc_info.value.errors[0].field == "projects.5.name"

    db.refresh(resume)
    assert resume.version == 1
    assert len(resume.projects) == 1


def test_unset_falls_back_to_field_default(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload(tags=["python"], isPublic=True))

    repo.update_resume(resume, {"$unset": {"tags": "", "isPublic": ""}})

    assert resume.tags == []
    assert resume.is_public is False
    assert resume.version == 2
    assert resume.previous_versions[0]["data"]["tags"] == ["python"]


def test_unset_required_field_is_rejected(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())

    with pytest.raises(DocumentValidationError) as exc_info:
        repo.update_resume(resume, {"$unset": {"title": ""}})
    assert [error.field for error in exc_info.value.errors] == ["title"]
