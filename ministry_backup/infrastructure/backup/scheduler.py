"""
BackupScheduler - Planificateur de sauvegardes.

Responsabilite unique:
----------------------
Planifier et executer les sauvegardes automatiques selon BACKUP_CRON.

Etats:
------
    stopped (initial) --start()--> running --stop()--> stopped

start() reste a l'etat stopped si BACKUP_ENABLED est faux,
si DATABASE_URL est vide ou si l'expression cron est invalide.
Chaque instance possede son propre BackgroundScheduler: il n'y a
pas de handle global.

Usage:
------
    handle = start_backup_scheduler(settings)   # None si non demarre
    ...
    stop_backup_scheduler(handle)
"""

from datetime import datetime
from typing import Any, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from ministry_backup.domain.exceptions import InvalidCronExpressionError
from ministry_backup.infrastructure.backup.config import BackupSettings, get_backup_settings
from ministry_backup.infrastructure.backup.service import BackupService
from ministry_backup.infrastructure.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "database_backup"


def _new_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(timezone="UTC")


def build_cron_trigger(expression: str, timezone: str = "UTC") -> CronTrigger:
    """
    Construit le trigger APScheduler d'une expression cron a 5 champs.

    Args:
        expression: Expression cron (minute heure jour mois jour-semaine).
        timezone: Fuseau dans lequel l'expression est interpretee.

    Raises:
        InvalidCronExpressionError: Si l'expression est invalide.
    """
    try:
        return CronTrigger.from_crontab(expression, timezone=timezone)
    except (ValueError, TypeError, KeyError) as e:
        # KeyError: fuseau inconnu (UnknownTimeZoneError / ZoneInfoNotFoundError)
        raise InvalidCronExpressionError(expression, str(e)) from e


class BackupScheduler:
    """
    Planificateur de sauvegardes automatiques.

    Execute les backups selon le cron configure.
    """

    def __init__(
        self,
        settings: BackupSettings,
        service: Optional[BackupService] = None,
        scheduler: Optional[BaseScheduler] = None,
    ):
        """
        Initialise le scheduler.

        Args:
            settings: Configuration des sauvegardes.
            service: Service de backup (defaut: construit depuis settings).
            scheduler: Scheduler APScheduler (defaut: BackgroundScheduler UTC).
        """
        self._settings = settings
        self._service = service or BackupService(settings)
        self._scheduler = scheduler or _new_scheduler()
        self._shut_down = False
        self._running = False

    def start(self) -> bool:
        """
        Demarre le scheduler.

        Returns:
            True si le scheduler tourne apres l'appel.
        """
        if self._running:
            logger.warning("backup_scheduler_already_running")
            return True

        if not self._settings.backup_enabled:
            logger.info(
                "backup_scheduler_disabled",
                hint="set BACKUP_ENABLED=true to enable",
            )
            return False

        if not self._settings.database_url:
            logger.info("backup_scheduler_skipped", reason="DATABASE_URL not configured")
            return False

        try:
            trigger = build_cron_trigger(
                self._settings.backup_cron, timezone=self._settings.backup_timezone
            )
        except InvalidCronExpressionError as e:
            logger.error("backup_cron_invalid", cron=e.expression, error=e.message)
            return False

        if self._shut_down:
            # Un scheduler eteint garde un executor ferme: on repart de zero
            self._scheduler = _new_scheduler()
            self._shut_down = False

        self._scheduler.add_job(
            self._run_backup,
            trigger=trigger,
            id=JOB_ID,
            name="Backup PostgreSQL",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        if not self._scheduler.running:
            self._scheduler.start()
        self._running = True

        logger.info(
            "backup_scheduler_started",
            cron=self._settings.backup_cron,
            timezone=self._settings.backup_timezone,
            retention_days=self._settings.backup_retention_days,
            s3_bucket=self._settings.backup_s3_bucket or "disabled",
        )
        return True

    def stop(self) -> None:
        """Arrete le scheduler. Sans effet s'il est deja arrete."""
        if not self._running:
            return

        if self._scheduler.get_job(JOB_ID):
            self._scheduler.remove_job(JOB_ID)
        if self._scheduler.running:
            self._scheduler.shutdown(wait=True)
            self._shut_down = True
        self._running = False

        logger.info("backup_scheduler_stopped")

    def _run_backup(self) -> None:
        """Execute le backup planifie."""
        logger.info("scheduled_backup_started")
        result = self._service.run_backup()

        if result.success:
            logger.info(
                "scheduled_backup_completed",
                filename=result.filename,
                duration_ms=result.duration_ms,
                uploaded_to_s3=result.uploaded_to_s3,
            )
        else:
            logger.error("scheduled_backup_failed", error=result.error)

    @property
    def service(self) -> BackupService:
        return self._service

    @property
    def is_running(self) -> bool:
        """Retourne True si le scheduler est actif."""
        return self._running

    @property
    def next_run(self) -> Optional[datetime]:
        """Retourne la prochaine execution planifiee."""
        if not self._running:
            return None

        job = self._scheduler.get_job(JOB_ID)
        if job:
            return job.next_run_time
        return None

    def status(self) -> dict[str, Any]:
        """Etat du scheduler pour l'API admin."""
        return {
            "enabled": self._settings.backup_enabled,
            "running": self._running,
            "busy": self._service.is_busy,
            "cron": self._settings.backup_cron,
            "timezone": self._settings.backup_timezone,
            "retention_days": self._settings.backup_retention_days,
            "s3_enabled": self._settings.s3_enabled,
            "next_run": self.next_run,
        }


def start_backup_scheduler(
    settings: Optional[BackupSettings] = None,
    service: Optional[BackupService] = None,
) -> Optional[BackupScheduler]:
    """
    Cree et demarre un scheduler.

    Returns:
        Le handle si le scheduler tourne, None sinon.
    """
    scheduler = BackupScheduler(settings or get_backup_settings(), service=service)
    if scheduler.start():
        return scheduler
    return None


def stop_backup_scheduler(handle: Optional[BackupScheduler]) -> None:
    """Arrete le scheduler d'un handle. Accepte None."""
    if handle is not None:
        handle.stop()
