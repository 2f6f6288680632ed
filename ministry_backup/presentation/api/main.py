"""
Main - Factory FastAPI de l'API admin des sauvegardes.

Responsabilite unique:
----------------------
Creer et configurer l'application FastAPI, demarrer le scheduler
de backups au lancement et l'arreter a l'extinction.

Usage:
------
    # Development
    uvicorn --factory ministry_backup.presentation.api.main:create_app --reload

    # Production
    uvicorn --factory ministry_backup.presentation.api.main:create_app --host 0.0.0.0 --port 8000
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from ministry_backup.infrastructure.backup.config import BackupSettings, get_backup_settings
from ministry_backup.infrastructure.backup.scheduler import BackupScheduler
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.infrastructure.logging import configure_logging, get_logger
from ministry_backup.infrastructure.logging.config import RequestLogger
from ministry_backup.presentation.api.backups.router import router as backups_router
from ministry_backup.presentation.api.config import APISettings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Demarre le scheduler de backups pour la duree de vie de l'app."""
    scheduler: BackupScheduler = app.state.backup_scheduler
    scheduler.start()
    try:
        yield
    finally:
        # stop() attend la fin d'un dump en cours
        await run_in_threadpool(scheduler.stop)


def create_app(
    settings: Optional[APISettings] = None,
    backup_settings: Optional[BackupSettings] = None,
    service: Optional[BackupService] = None,
) -> FastAPI:
    """
    Factory pour creer l'application FastAPI.

    Args:
        settings: Configuration API (defaut: environnement).
        backup_settings: Configuration des backups (defaut: environnement).
        service: BackupService deja construit (tests).

    Returns:
        Application FastAPI configuree.
    """
    settings = settings or get_settings()
    backup_settings = backup_settings or get_backup_settings()

    configure_logging(
        json_logs=backup_settings.is_production,
        log_level=backup_settings.log_level,
    )
    logger = get_logger("api")

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    service = service or BackupService(backup_settings)
    app.state.api_settings = settings
    app.state.backup_service = service
    app.state.backup_scheduler = BackupScheduler(backup_settings, service=service)

    # Request logging middleware
    app.add_middleware(BaseHTTPMiddleware, dispatch=RequestLogger())

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    def health():
        """Endpoint de sante."""
        return {"status": "healthy"}

    app.include_router(backups_router, prefix=settings.api_prefix)

    logger.info("app_created", version=settings.api_version)

    return app
