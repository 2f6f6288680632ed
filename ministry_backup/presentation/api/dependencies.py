"""
Dependencies - Injection de dependances FastAPI.

Responsabilite unique:
----------------------
Fournir le service de backup, le scheduler et le controle d'acces
admin aux endpoints.

Le service et le scheduler sont crees par create_app() et ranges
dans app.state: une seule instance par application.
"""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ministry_backup.infrastructure.backup.scheduler import BackupScheduler
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.presentation.api.config import APISettings

bearer_scheme = HTTPBearer(auto_error=False)


def get_api_settings(request: Request) -> APISettings:
    """Retourne la configuration de l'application courante."""
    return request.app.state.api_settings


def get_backup_service(request: Request) -> BackupService:
    """Retourne le BackupService."""
    return request.app.state.backup_service


def get_backup_scheduler(request: Request) -> BackupScheduler:
    """Retourne le BackupScheduler."""
    return request.app.state.backup_scheduler


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: APISettings = Depends(get_api_settings),
) -> None:
    """
    Verifie le jeton admin.

    Raises:
        HTTPException 401 si jeton absent, invalide ou non configure.
    """
    expected = settings.admin_api_token
    if (
        not expected
        or not credentials
        or not secrets.compare_digest(credentials.credentials, expected)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )
