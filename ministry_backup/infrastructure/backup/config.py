"""
Backup Config - Configuration des sauvegardes.

Responsabilite unique:
----------------------
Configurer les parametres de backup depuis l'environnement (ou .env).

Variables:
----------
- BACKUP_ENABLED: Active le scheduler (defaut: false)
- BACKUP_CRON: Expression cron (defaut: "0 3 * * *", 3h du matin)
- BACKUP_TIMEZONE: Fuseau du cron (defaut: UTC)
- BACKUP_RETENTION_DAYS: Nombre de jours de retention locale
- BACKUP_S3_BUCKET: Bucket off-site, vide = pas d'envoi
- BACKUP_S3_PREFIX: Prefixe des cles distantes
- DATABASE_URL: Connexion PostgreSQL, requise pour dump et restauration
- S3_ENDPOINT, S3_REGION, S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY
- ENV: "production" force PGSSLMODE=require
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class BackupSettings(BaseSettings):
    """
    Configuration des sauvegardes.

    Chargee depuis les variables d'environnement.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Base de donnees
    database_url: str = ""

    # Scheduler
    backup_enabled: bool = False
    backup_cron: str = "0 3 * * *"
    backup_timezone: str = "UTC"

    # Stockage local
    backup_dir: str = "backups"
    backup_retention_days: int = 7
    backup_min_size_bytes: int = 100

    # Sous-processus
    backup_dump_timeout_seconds: float = 300
    backup_restore_timeout_seconds: float = 600
    pg_dump_path: str = "pg_dump"
    psql_path: str = "psql"

    # Off-site (S3, R2, MinIO)
    backup_s3_bucket: str = ""
    backup_s3_prefix: str = "backups/"
    s3_endpoint: str = ""
    s3_region: str = "auto"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""

    # Environnement
    env: str = "development"
    log_level: str = "INFO"

    @property
    def backup_path(self) -> Path:
        """Retourne le repertoire de backup (relatif au cwd si non absolu)."""
        return Path(self.backup_dir).expanduser().resolve()

    @property
    def s3_enabled(self) -> bool:
        """Retourne True si un bucket off-site est configure."""
        return bool(self.backup_s3_bucket)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


@lru_cache
def get_backup_settings() -> BackupSettings:
    """Retourne la configuration backup (cached)."""
    return BackupSettings()
