"""
OffsiteStorage Port - Interface pour le stockage off-site des backups.

Responsabilite unique:
----------------------
Definir le contrat d'envoi d'un dump vers un stockage distant.

Usage:
------
En production, utiliser S3BackupUploader (S3, R2, MinIO).
En test, utiliser InMemoryOffsiteStorage.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class OffsiteStorage(ABC):
    """
    Interface pour l'envoi des dumps hors de l'hote.

    Contrairement au reste du sous-systeme, les implementations
    levent une exception en cas d'echec: c'est l'appelant qui
    decide que l'echec n'est pas fatal.
    """

    @abstractmethod
    def upload(self, filepath: Path, filename: str) -> str:
        """
        Envoie un fichier local.

        Args:
            filepath: Chemin du dump compresse.
            filename: Nom du fichier, suffixe de la cle distante.

        Returns:
            Cle de l'objet distant.

        Raises:
            OffsiteUploadError: Si la configuration manque ou l'envoi echoue.
        """
        pass
