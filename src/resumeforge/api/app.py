from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resumeforge.api.routes import router as api_router
from resumeforge.config import get_settings
from resumeforge.core.errors import DocumentValidationError, VersionConflictError
from resumeforge.db.init import init_database
from resumeforge.logging_config import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.exception_handler(DocumentValidationError)
    async def _validation_failed(request: Request, exc: DocumentValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": exc.as_dicts()})

    @app.exception_handler(VersionConflictError)
    async def _version_conflict(request: Request, exc: VersionConflictError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "expectedVersion": exc.expected, "currentVersion": exc.actual},
        )

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    return app
