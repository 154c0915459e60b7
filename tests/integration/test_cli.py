from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy import update
from typer.testing import CliRunner

from resumeforge.cli.app import app
from resumeforge.db.models import Resume
from resumeforge.db.repositories import Repository

runner = CliRunner()


def test_convert_prints_canonical_document(tmp_path: Path) -> None:
    body = tmp_path / "resume.json"
    body.write_text(
        json.dumps({"_id": "x", "education": [{"gpa": "3.9", "startDate": "2011-09-01"}], "skills": "sql"}),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["convert", "--kind", "resume", "--file", str(body)])
    assert result.exit_code == 0
    converted = json.loads(result.stdout)
    assert converted == {
        "education": [{"gpa": 3.9, "startDate": "2011-09-01T00:00:00+00:00"}],
        "skills": [],
    }

    rejected = runner.invoke(app, ["convert", "--kind", "invoice", "--file", str(body)])
    assert rejected.exit_code != 0


def test_history_commands(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())
    repo.update_resume(resume, {"title": "Revised"})

    history = runner.invoke(app, ["resume", "history", "--resume-id", resume.id])
    assert history.exit_code == 0
    assert json.loads(history.stdout)["version"] == 2

    check = runner.invoke(app, ["resume", "check-history"])
    assert check.exit_code == 0
    assert json.loads(check.stdout) == {"ok": True, "problems": {}}


def test_check_history_flags_broken_bookkeeping(db, make_user, resume_payload) -> None:
    repo = Repository(db)
    resume = repo.create_resume(make_user(), resume_payload())
    db.execute(update(Resume).where(Resume.id == resume.id).values(version=5))
    db.commit()

    check = runner.invoke(app, ["resume", "check-history"])
    assert check.exit_code == 1
    assert resume.id in json.loads(check.stdout)["problems"]


def test_set_role_command(make_user) -> None:
    make_user()

    promoted = runner.invoke(app, ["user", "set-role", "--email", "ada@example.com", "--role", "admin"])
    assert promoted.exit_code == 0
    assert json.loads(promoted.stdout)["role"] == "admin"

    missing = runner.invoke(app, ["user", "set-role", "--email", "nobody@example.com", "--role", "admin"])
    assert missing.exit_code != 0
