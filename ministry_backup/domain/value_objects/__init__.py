"""
Value Objects du domaine.

Objets immuables compares par valeur.
"""

from ministry_backup.domain.value_objects.backup_filename import (
    BackupFilename,
    is_backup_filename,
)

__all__ = ["BackupFilename", "is_backup_filename"]
