"""
api/app.py — FastAPI application factory.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from ..auth.sqlite_db import init_db
from ..core.config import APP_VERSION, CORS_ORIGINS, load_token_settings
from ..core.errors import WorklogError
from .errors import request_validation_handler, unhandled_exception_handler, worklog_error_handler
from .routes_admin import router as admin_router
from .routes_auth import router as auth_router
from .routes_entries import router as entries_router
from .routes_import import router as import_router
from .routes_reports import router as reports_router
from .routes_teams import router as teams_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Worklog Productivity API",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    # Resolved once; a missing secret stops startup here.
    app.state.token_settings = load_token_settings()

    # ── CORS ──────────────────────────────────────────────────────────────────
    origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(entries_router)
    app.include_router(reports_router)
    app.include_router(teams_router)
    app.include_router(admin_router)
    app.include_router(import_router)

    # ── Health ────────────────────────────────────────────────────────────────
    @app.get("/health")
    async def health():
        return {"status": "ok", "version": APP_VERSION}

    # ── Exception handlers ────────────────────────────────────────────────────
    app.add_exception_handler(WorklogError, worklog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    return app
