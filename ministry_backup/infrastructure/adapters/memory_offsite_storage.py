"""
InMemoryOffsiteStorage - Implementation en memoire de OffsiteStorage.

Responsabilite unique:
----------------------
Conserver les dumps "envoyes" en memoire (pour dev/tests).
"""

from pathlib import Path
from threading import Lock
from typing import Optional

from ministry_backup.domain.exceptions import OffsiteUploadError
from ministry_backup.domain.ports.offsite_storage import OffsiteStorage


class InMemoryOffsiteStorage(OffsiteStorage):
    """
    OffsiteStorage en memoire.

    Example:
        >>> storage = InMemoryOffsiteStorage(prefix="backups/")
        >>> storage.upload(Path("/tmp/backup_x.sql.gz"), "backup_x.sql.gz")
        'backups/backup_x.sql.gz'
    """

    def __init__(self, prefix: str = "backups/", fail_with: Optional[str] = None):
        """
        Initialise le storage.

        Args:
            prefix: Prefixe des cles.
            fail_with: Si defini, chaque envoi leve OffsiteUploadError.
        """
        self._prefix = prefix
        self._fail_with = fail_with
        self._objects: dict[str, bytes] = {}
        self._lock = Lock()

    def upload(self, filepath: Path, filename: str) -> str:
        key = f"{self._prefix}{filename}"
        if self._fail_with:
            raise OffsiteUploadError(self._fail_with, key=key)

        data = Path(filepath).read_bytes()
        with self._lock:
            self._objects[key] = data
        return key

    def get(self, key: str) -> Optional[bytes]:
        """Retourne le contenu envoye sous cette cle."""
        with self._lock:
            return self._objects.get(key)

    @property
    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._objects)
