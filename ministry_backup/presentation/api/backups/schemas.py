"""
Backups Schemas - Modeles Pydantic pour les endpoints de sauvegarde.

Responsabilite unique:
----------------------
Definir les schemas de requete/reponse de l'API admin des backups.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BackupInfoResponse(BaseModel):
    """Fichier de backup present sur disque."""

    filename: str
    size_bytes: int
    created_at: datetime


class BackupListResponse(BaseModel):
    """Liste des backups, le plus recent en premier."""

    items: list[BackupInfoResponse]
    total: int


class BackupResultResponse(BaseModel):
    """Resultat d'un dump."""

    success: bool
    filename: Optional[str] = None
    filepath: Optional[str] = None
    size_bytes: int = 0
    duration_ms: int = 0
    uploaded_to_s3: bool = False
    error: Optional[str] = None
    code: Optional[str] = None


class RestoreRequest(BaseModel):
    """Requete de restauration (operation destructive)."""

    confirm: bool = Field(
        ...,
        description="Doit valoir true: la base en service sera ecrasee",
    )


class RestoreResultResponse(BaseModel):
    """Resultat d'une restauration."""

    success: bool
    filename: Optional[str] = None
    duration_ms: int = 0
    error: Optional[str] = None
    code: Optional[str] = None


class SchedulerStatusResponse(BaseModel):
    """Etat du scheduler de backups."""

    enabled: bool
    running: bool
    busy: bool = False
    cron: str
    timezone: str
    retention_days: int
    s3_enabled: bool
    next_run: Optional[datetime] = None
