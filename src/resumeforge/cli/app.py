from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn
from sqlalchemy import select

from resumeforge.api.app import create_app
from resumeforge.config import get_settings
from resumeforge.core.converters import ENTITY_PLANS, convert
from resumeforge.core.versioning import check_history
from resumeforge.db.init import init_database
from resumeforge.db.models import Resume
from resumeforge.db.repositories import Repository
from resumeforge.db.session import SessionLocal
from resumeforge.logging_config import configure_logging
from resumeforge.types import encode_document

app = typer.Typer(help="ResumeForge CLI")
resume_app = typer.Typer(help="Inspect stored resumes")
user_app = typer.Typer(help="Manage users")

app.add_typer(resume_app, name="resume")
app.add_typer(user_app, name="user")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


@app.command("init")
def init_cmd() -> None:
    """Initialize database, directories, and default templates."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@app.command("convert")
def convert_cmd(
    kind: str = typer.Option(..., "--kind"),
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
) -> None:
    """Print the canonical form of a JSON request body."""
    configure_logging()
    if kind not in ENTITY_PLANS:
        raise typer.BadParameter(f"kind must be one of {', '.join(ENTITY_PLANS)}")
    payload = json.loads(file.read_text(encoding="utf-8"))
    typer.echo(json.dumps(encode_document(convert(kind, payload)), indent=2))


@resume_app.command("history")
def resume_history(resume_id: str = typer.Option(..., "--resume-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        resume = repo.get_resume(resume_id)
        if not resume:
            raise typer.BadParameter(f"resume {resume_id} not found")
        typer.echo(json.dumps(encode_document(repo.resume_history(resume)), indent=2))


@resume_app.command("check-history")
def resume_check_history() -> None:
    """Verify version bookkeeping for every stored resume."""
    configure_logging()
    ensure_initialized()
    report: dict[str, list[str]] = {}
    with SessionLocal() as db:
        for resume in db.scalars(select(Resume).order_by(Resume.created_at.asc())):
            problems = check_history(resume.to_document())
            if problems:
                report[resume.id] = problems

    typer.echo(json.dumps({"ok": not report, "problems": report}, indent=2))
    if report:
        raise typer.Exit(code=1)


@user_app.command("set-role")
def user_set_role(
    email: str = typer.Option(..., "--email"),
    role: str = typer.Option(..., "--role"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            user = Repository(db).set_role(email, role)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(json.dumps({"id": user.id, "email": user.email, "role": user.role}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
