"""
Domain Layer - Regles du sous-systeme de sauvegarde.

Ce module contient:
    - entities/: Resultats et descripteurs (BackupResult, BackupInfo)
    - value_objects/: Convention de nommage (BackupFilename)
    - ports/: Interfaces vers l'exterieur (OffsiteStorage)
    - exceptions: Exceptions metier

Principes:
    - AUCUNE dependance vers les couches externes
    - Testable sans infrastructure
"""

from ministry_backup.domain.exceptions import (
    BackupCommandError,
    BackupInProgressError,
    BackupNotFoundError,
    BackupTooSmallError,
    DatabaseUrlMissingError,
    DomainException,
    InvalidBackupFilenameError,
    InvalidCronExpressionError,
    InvalidDatabaseUrlError,
    OffsiteUploadError,
)

__all__ = [
    "DomainException",
    "DatabaseUrlMissingError",
    "BackupInProgressError",
    "BackupTooSmallError",
    "InvalidDatabaseUrlError",
    "InvalidBackupFilenameError",
    "BackupNotFoundError",
    "InvalidCronExpressionError",
    "OffsiteUploadError",
    "BackupCommandError",
]
