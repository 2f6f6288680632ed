"""
Configuration API - Settings Pydantic.

Responsabilite unique:
----------------------
Charger et valider la configuration de l'API admin depuis les variables d'env.

Variables:
----------
- ADMIN_API_TOKEN: Jeton bearer des administrateurs (vide = API fermee)
- API_PREFIX: Prefixe des routes (defaut: /api/v1)
- CORS_ORIGINS: Origines autorisees
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """
    Configuration de l'API admin.

    Chargee depuis les variables d'environnement.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Auth
    admin_api_token: str = ""

    # API
    api_title: str = "Ministry Backup Admin API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> APISettings:
    """Retourne la configuration (cached)."""
    return APISettings()
