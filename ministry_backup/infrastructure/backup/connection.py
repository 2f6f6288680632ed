"""
Connection - Decomposition de DATABASE_URL pour pg_dump et psql.

Responsabilite unique:
----------------------
Transformer une URL PostgreSQL en variables d'environnement libpq
(PGHOST, PGPORT, ...) passees a un seul sous-processus.

Les parametres ne sont jamais logges ni persistes: le repr masque
le mot de passe.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, unquote, urlparse

from ministry_backup.domain.exceptions import InvalidDatabaseUrlError

SUPPORTED_SCHEMES = ("postgres", "postgresql")
DEFAULT_PORT = 5432


@dataclass(frozen=True)
class ConnectionParams:
    """
    Parametres de connexion PostgreSQL.

    Attributes:
        host: Hote du serveur (vide = defaut libpq).
        port: Port TCP.
        database: Nom de la base.
        user: Utilisateur.
        password: Mot de passe (jamais affiche).
        sslmode: Mode SSL libpq (require, verify-full, ...).
    """

    database: str
    host: str = ""
    port: int = DEFAULT_PORT
    user: str = ""
    password: str = ""
    sslmode: Optional[str] = None

    def to_env(self) -> dict[str, str]:
        """
        Retourne les variables libpq pour le sous-processus.

        Les valeurs vides sont omises pour laisser libpq appliquer
        ses propres defauts.
        """
        env = {
            "PGHOST": self.host,
            "PGPORT": str(self.port),
            "PGDATABASE": self.database,
            "PGUSER": self.user,
            "PGPASSWORD": self.password,
            "PGSSLMODE": self.sslmode or "",
        }
        return {key: value for key, value in env.items() if value}

    def __repr__(self) -> str:
        return (
            f"ConnectionParams(host={self.host!r}, port={self.port}, "
            f"database={self.database!r}, user={self.user!r}, "
            f"password='***', sslmode={self.sslmode!r})"
        )


def parse_database_url(url: str, production: bool = False) -> ConnectionParams:
    """
    Parse une URL de base de donnees.

    Args:
        url: URL postgres:// ou postgresql://.
        production: True pour imposer sslmode=require si l'URL n'en fixe pas.

    Returns:
        ConnectionParams.

    Raises:
        InvalidDatabaseUrlError: Schema non supporte, port invalide
            ou base absente.
    """
    if not url:
        raise InvalidDatabaseUrlError("empty value")

    parsed = urlparse(url)
    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise InvalidDatabaseUrlError(f"unsupported scheme '{parsed.scheme}'")

    try:
        port = parsed.port or DEFAULT_PORT
    except ValueError:
        raise InvalidDatabaseUrlError("port is not a valid number")

    database = unquote(parsed.path.lstrip("/"))
    if not database:
        raise InvalidDatabaseUrlError("missing database name")

    query = parse_qs(parsed.query)
    sslmode = query.get("sslmode", [None])[0]
    if sslmode is None and production:
        sslmode = "require"

    return ConnectionParams(
        host=parsed.hostname or "",
        port=port,
        database=database,
        user=unquote(parsed.username or ""),
        password=unquote(parsed.password or ""),
        sslmode=sslmode,
    )
