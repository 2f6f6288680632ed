"""
S3BackupUploader - Envoi des dumps vers un stockage compatible S3.

Responsabilite unique:
----------------------
Copier un dump local vers un bucket (AWS S3, Cloudflare R2, MinIO)
sous BACKUP_S3_PREFIX + nom du fichier.

Adressage path-style pour compatibilite avec les stores non-AWS.
"""

from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ministry_backup.domain.exceptions import OffsiteUploadError
from ministry_backup.domain.ports.offsite_storage import OffsiteStorage
from ministry_backup.infrastructure.backup.config import BackupSettings

CONTENT_TYPE = "application/gzip"
CONTENT_ENCODING = "gzip"


class S3BackupUploader(OffsiteStorage):
    """
    Implementation S3 du port OffsiteStorage.

    Le client boto3 est cree a la premiere utilisation pour que
    la validation de configuration se fasse au moment de l'envoi.
    """

    def __init__(self, settings: BackupSettings, client: Optional[Any] = None):
        """
        Initialise l'uploader.

        Args:
            settings: Configuration des sauvegardes.
            client: Client boto3 s3 deja construit (tests).
        """
        self._settings = settings
        self._client = client

    def upload(self, filepath: Path, filename: str) -> str:
        """
        Envoie le dump vers le bucket.

        Returns:
            Cle de l'objet cree.

        Raises:
            OffsiteUploadError: Configuration incomplete ou erreur S3.
        """
        key = f"{self._settings.backup_s3_prefix}{filename}"
        client = self._get_client()

        try:
            client.upload_file(
                str(filepath),
                self._settings.backup_s3_bucket,
                key,
                ExtraArgs={
                    "ContentType": CONTENT_TYPE,
                    "ContentEncoding": CONTENT_ENCODING,
                },
            )
        except (BotoCoreError, ClientError, OSError) as e:
            raise OffsiteUploadError(str(e), key=key) from e

        return key

    def _get_client(self):
        """Retourne le client s3, le cree si necessaire."""
        if self._client is not None:
            return self._client

        missing = self._missing_settings()
        if missing:
            raise OffsiteUploadError(
                f"missing configuration: {', '.join(missing)}"
            )

        self._client = boto3.client(
            "s3",
            endpoint_url=self._settings.s3_endpoint,
            region_name=self._settings.s3_region,
            aws_access_key_id=self._settings.s3_access_key_id,
            aws_secret_access_key=self._settings.s3_secret_access_key,
            config=Config(
                s3={"addressing_style": "path"},
                signature_version="s3v4",
            ),
        )
        return self._client

    def _missing_settings(self) -> list[str]:
        """Liste les variables S3 requises absentes."""
        required = {
            "BACKUP_S3_BUCKET": self._settings.backup_s3_bucket,
            "S3_ENDPOINT": self._settings.s3_endpoint,
            "S3_REGION": self._settings.s3_region,
            "S3_ACCESS_KEY_ID": self._settings.s3_access_key_id,
            "S3_SECRET_ACCESS_KEY": self._settings.s3_secret_access_key,
        }
        return [name for name, value in required.items() if not value]
