"""
Backup Entities - Resultats et descripteurs de sauvegarde.

Responsabilite unique:
----------------------
Representer le resultat d'un dump, d'une restauration et les
fichiers de backup presents sur disque.

Ces objets sont immuables et ne sont jamais persistes: ils sont
retournes a l'appelant (API admin, CLI, scheduler) puis oublies.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class BackupResult:
    """
    Resultat d'une tentative de dump.

    Attributes:
        success: True si le dump est valide sur disque.
        filename: Nom du fichier (present ssi succes).
        filepath: Chemin absolu du fichier.
        size_bytes: Taille du fichier compresse.
        duration_ms: Duree de l'operation en millisecondes.
        uploaded_to_s3: True si l'envoi off-site a reussi.
        error: Message d'erreur (present ssi echec).
        code: Code d'erreur du domaine (present ssi echec).
    """

    success: bool
    duration_ms: int = 0
    filename: Optional[str] = None
    filepath: Optional[str] = None
    size_bytes: int = 0
    uploaded_to_s3: bool = False
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def failed(
        cls, error: str, duration_ms: int = 0, code: Optional[str] = None
    ) -> "BackupResult":
        """Cree un resultat d'echec."""
        return cls(success=False, duration_ms=duration_ms, error=error, code=code)

    def to_dict(self) -> dict[str, Any]:
        """Retourne le resultat sous forme de dict serialisable."""
        return asdict(self)


@dataclass(frozen=True)
class RestoreResult:
    """
    Resultat d'une restauration.

    Attributes:
        success: True si psql a termine sans erreur.
        filename: Nom du backup demande.
        duration_ms: Duree de l'operation en millisecondes.
        error: Message d'erreur (present ssi echec).
        code: Code d'erreur du domaine (present ssi echec).
    """

    success: bool
    filename: Optional[str] = None
    duration_ms: int = 0
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def failed(
        cls,
        error: str,
        filename: Optional[str] = None,
        duration_ms: int = 0,
        code: Optional[str] = None,
    ) -> "RestoreResult":
        """Cree un resultat d'echec."""
        return cls(
            success=False,
            filename=filename,
            duration_ms=duration_ms,
            error=error,
            code=code,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BackupInfo:
    """
    Fichier de backup present sur disque.

    created_at provient du mtime du fichier, pas de son contenu.
    """

    filename: str
    size_bytes: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        }
