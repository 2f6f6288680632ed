"""
Value Object pour le nom d'un fichier de backup.

Convention de nommage:
----------------------
    backup_<YYYY-MM-DD_HH-MM-SS>.sql.gz

Le timestamp est en UTC, a la seconde, sans ':' ni '.'.
Cette convention est le seul moyen d'identifier un backup lors du
listing, de la purge et de la validation avant restauration.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from ministry_backup.domain.exceptions import InvalidBackupFilenameError

PREFIX = "backup_"
SUFFIX = ".sql.gz"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def is_backup_filename(name: str) -> bool:
    """Retourne True si le nom suit la convention backup_*.sql.gz."""
    return name.startswith(PREFIX) and name.endswith(SUFFIX)


@dataclass(frozen=True, slots=True)
class BackupFilename:
    """
    Nom de fichier d'un dump compresse.

    Attributes:
        value: Nom du fichier (sans repertoire).

    Example:
        >>> BackupFilename.generate(datetime(2024, 1, 1, 3, 0, tzinfo=timezone.utc))
        BackupFilename('backup_2024-01-01_03-00-00.sql.gz')
    """

    value: str

    def __post_init__(self) -> None:
        """Valide le nom apres initialisation."""
        self._validate(self.value)

    @staticmethod
    def _validate(value: Any) -> None:
        """
        Valide que la valeur est un nom de backup sur.

        Raises:
            InvalidBackupFilenameError: Traversee de repertoire,
                separateur de chemin ou nom hors convention.
        """
        if not isinstance(value, str) or not value:
            raise InvalidBackupFilenameError(value)

        if ".." in value or "/" in value or "\\" in value:
            raise InvalidBackupFilenameError(value)

        if not is_backup_filename(value):
            raise InvalidBackupFilenameError(value)

    @classmethod
    def generate(cls, now: Optional[datetime] = None) -> "BackupFilename":
        """
        Cree le nom d'un nouveau backup a partir de l'heure courante.

        Args:
            now: Instant de reference (defaut: maintenant, UTC).

        Returns:
            BackupFilename horodate.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return cls(f"{PREFIX}{now.strftime(TIMESTAMP_FORMAT)}{SUFFIX}")

    @property
    def timestamp(self) -> Optional[datetime]:
        """Timestamp encode dans le nom, None si illisible."""
        raw = self.value[len(PREFIX):-len(SUFFIX)]
        try:
            return datetime.strptime(raw, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"BackupFilename('{self.value}')"
