"""
Entites du domaine.

    - BackupResult: Resultat d'un dump
    - RestoreResult: Resultat d'une restauration
    - BackupInfo: Fichier de backup present sur disque
"""

from ministry_backup.domain.entities.backup import BackupInfo, BackupResult, RestoreResult

__all__ = [
    "BackupResult",
    "RestoreResult",
    "BackupInfo",
]
