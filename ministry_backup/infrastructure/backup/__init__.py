"""
Backup Infrastructure - Sauvegarde automatisee.

Responsabilite:
---------------
Gerer les sauvegardes PostgreSQL automatisees.

Features:
---------
- Backup planifie (cron) via pg_dump + gzip
- Verification de taille et nettoyage des fichiers partiels
- Retention configurable
- Upload vers S3/R2/MinIO (optionnel)
- Restauration via psql
"""

from ministry_backup.infrastructure.backup.config import BackupSettings, get_backup_settings
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.infrastructure.backup.scheduler import (
    BackupScheduler,
    start_backup_scheduler,
    stop_backup_scheduler,
)

__all__ = [
    "BackupSettings",
    "get_backup_settings",
    "BackupService",
    "BackupScheduler",
    "start_backup_scheduler",
    "stop_backup_scheduler",
]
