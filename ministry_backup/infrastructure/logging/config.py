"""
Logging Config - Configuration structlog du sous-systeme de backup.

Responsabilite unique:
----------------------
Configurer structlog pour le worker, la CLI et l'API admin.

Sorties:
--------
- Development: rendu console colore
- Production: une ligne JSON par evenement
- Les logs vont sur stderr: stdout reste reserve aux sorties de la
  CLI (ex: `ministry-backup list --json`)

Secrets:
--------
Les cles d'evenement contenant password, secret ou token, ainsi que
database_url, sont masquees avant rendu. Les parametres de connexion
PostgreSQL ne doivent de toute facon jamais etre passes a un logger.

Usage:
------
    from ministry_backup.infrastructure.logging import configure_logging, get_logger

    configure_logging(json_logs=True)
    logger = get_logger(__name__)
    logger.info("backup_created", filename="backup_2024-01-01_03-00-00.sql.gz")
"""

import logging
import sys
import time
import uuid
from typing import IO, Any, Optional

import structlog

REDACTED = "***"
REQUEST_ID_HEADER = "X-Request-ID"
_SENSITIVE_MARKERS = ("password", "secret", "token")
_SENSITIVE_KEYS = {"database_url"}

# Bibliotheques tierces trop bavardes en INFO
NOISY_LOGGERS = {
    "apscheduler": logging.WARNING,
    "botocore": logging.WARNING,
    "boto3": logging.WARNING,
    "s3transfer": logging.WARNING,
    "urllib3": logging.WARNING,
}

# Sondes de sante: loggees en debug seulement
QUIET_PATHS = frozenset({"/health"})


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Processor structlog qui masque les valeurs sensibles."""
    for key in list(event_dict):
        lowered = key.lower()
        if lowered in _SENSITIVE_KEYS or any(m in lowered for m in _SENSITIVE_MARKERS):
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    json_logs: bool = False,
    log_level: str = "INFO",
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure le logging global.

    Args:
        json_logs: True pour JSON (production), False pour la console.
        log_level: Niveau minimum (DEBUG, INFO, WARNING, ERROR).
        stream: Flux de sortie (defaut: stderr).
    """
    renderer = (
        [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        if json_logs
        else [structlog.dev.ConsoleRenderer(colors=True)]
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            redact_secrets,
            *renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Retourne un logger structure (name: nom du module)."""
    return structlog.get_logger(name)


class RequestLogger:
    """
    Middleware de logging pour l'API admin.

    Chaque requete recoit un identifiant (repris de X-Request-ID s'il
    est fourni) lie au contexte structlog et renvoye dans la reponse,
    pour relier un appel admin aux evenements backup_* qu'il produit.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or get_logger("api.requests")

    async def __call__(self, request, call_next):
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            self._logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(start_time),
            )
            raise

        log = self._logger.debug if path in QUIET_PATHS else self._logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(start_time),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
