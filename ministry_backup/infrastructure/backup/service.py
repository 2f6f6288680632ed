"""
BackupService - Service de sauvegarde PostgreSQL.

Responsabilite unique:
----------------------
Executer et gerer les sauvegardes de base de donnees:
dump compresse, verification, envoi off-site, purge, listing
et restauration.

Contrat:
--------
run_backup() et restore_backup() ne levent jamais: tout echec est
converti en BackupResult / RestoreResult. Un echec d'envoi off-site
ne fait pas echouer le dump local.

Concurrence:
------------
Un verrou non bloquant serialise les dumps et restaurations d'une
meme instance. L'appel perdant recoit un resultat d'echec
(BACKUP_BUSY). Aucun verrou inter-processus.

Usage:
------
    service = BackupService(settings)
    result = service.run_backup()
    service.restore_backup("backup_2024-01-15_03-00-00.sql.gz")
"""

import gzip
import os
import shutil
import subprocess
import tempfile
import threading
import time
from contextlib import suppress
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import IO, List, Optional

from ministry_backup.domain.entities.backup import BackupInfo, BackupResult, RestoreResult
from ministry_backup.domain.exceptions import (
    BackupCommandError,
    BackupInProgressError,
    BackupNotFoundError,
    BackupTooSmallError,
    DatabaseUrlMissingError,
    DomainException,
    InvalidBackupFilenameError,
)
from ministry_backup.domain.ports.offsite_storage import OffsiteStorage
from ministry_backup.domain.value_objects.backup_filename import (
    BackupFilename,
    is_backup_filename,
)
from ministry_backup.infrastructure.backup.config import BackupSettings
from ministry_backup.infrastructure.backup.connection import (
    ConnectionParams,
    parse_database_url,
)
from ministry_backup.infrastructure.backup.s3_uploader import S3BackupUploader
from ministry_backup.infrastructure.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024
MAX_STDERR_CHARS = 2000


def _error_message(error: BaseException) -> str:
    """Message lisible d'une exception (sans le prefixe [CODE])."""
    if isinstance(error, DomainException):
        return error.message
    return str(error) or type(error).__name__


def _error_code(error: BaseException) -> Optional[str]:
    return error.code if isinstance(error, DomainException) else None


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _read_stderr(stderr_file: IO[bytes]) -> str:
    """Relit la sortie d'erreur capturee dans un fichier temporaire."""
    stderr_file.seek(0)
    text = stderr_file.read().decode("utf-8", errors="replace").strip()
    return text[-MAX_STDERR_CHARS:]


class _Watchdog:
    """
    Tue un sous-processus qui depasse son timeout.

    En sortie de bloc, un processus encore vivant est tue et attendu
    pour ne jamais laisser de pg_dump/psql orphelin.
    """

    def __init__(self, process: subprocess.Popen, timeout_seconds: float):
        self._process = process
        self._timer = threading.Timer(timeout_seconds, self._kill)
        self._timer.daemon = True
        self.fired = False

    def _kill(self) -> None:
        if self._process.poll() is None:
            self.fired = True
            self._process.kill()

    def __enter__(self) -> "_Watchdog":
        self._timer.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._timer.cancel()
        if self._process.poll() is None:
            self._process.kill()
            self._process.wait()
        return False


class BackupService:
    """
    Service de sauvegarde PostgreSQL.

    Cree, liste, purge et restaure les backups.
    """

    def __init__(
        self,
        settings: BackupSettings,
        uploader: Optional[OffsiteStorage] = None,
    ):
        """
        Initialise le service de backup.

        Args:
            settings: Configuration des sauvegardes.
            uploader: Stockage off-site. Par defaut S3 si BACKUP_S3_BUCKET
                est defini, sinon aucun envoi.
        """
        self._settings = settings
        self._backup_dir = settings.backup_path
        if uploader is None and settings.s3_enabled:
            uploader = S3BackupUploader(settings)
        self._uploader = uploader
        self._lock = threading.Lock()

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    @property
    def is_busy(self) -> bool:
        """True si un dump ou une restauration est en cours."""
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Dump
    # ------------------------------------------------------------------

    def run_backup(self) -> BackupResult:
        """
        Cree un backup de la base de donnees.

        Returns:
            BackupResult avec le resultat. Ne leve jamais.
        """
        start = time.monotonic()

        if not self._settings.database_url:
            error = DatabaseUrlMissingError()
            logger.error("backup_failed", error=error.message)
            return BackupResult.failed(error.message, code=error.code)

        if not self._lock.acquire(blocking=False):
            error = BackupInProgressError()
            logger.warning("backup_skipped", reason=error.code)
            return BackupResult.failed(
                error.message, duration_ms=_elapsed_ms(start), code=error.code
            )

        try:
            return self._run_backup_locked(start)
        finally:
            self._lock.release()

    def _run_backup_locked(self, start: float) -> BackupResult:
        filename = BackupFilename.generate()
        filepath = self._backup_dir / filename.value

        try:
            self._ensure_backup_dir()
            logger.info("backup_started", filename=filename.value)

            params = parse_database_url(
                self._settings.database_url,
                production=self._settings.is_production,
            )
            self._dump_to(filepath, params)

            size = filepath.stat().st_size
            if size < self._settings.backup_min_size_bytes:
                raise BackupTooSmallError(size)

        except Exception as e:
            message = _error_message(e)
            logger.error("backup_failed", filename=filename.value, error=message)
            self._remove_partial(filepath)
            return BackupResult.failed(
                message, duration_ms=_elapsed_ms(start), code=_error_code(e)
            )

        logger.info(
            "backup_created",
            filename=filename.value,
            size_bytes=size,
            size_kb=round(size / 1024, 1),
        )

        uploaded = self._upload(filepath, filename.value)

        try:
            self.prune_old_backups()
        except OSError as e:
            logger.error("backup_prune_failed", error=str(e))

        return BackupResult(
            success=True,
            filename=filename.value,
            filepath=str(filepath),
            size_bytes=size,
            duration_ms=_elapsed_ms(start),
            uploaded_to_s3=uploaded,
        )

    def _dump_to(self, filepath: Path, params: ConnectionParams) -> None:
        """
        Lance pg_dump et compresse sa sortie dans filepath.

        Raises:
            BackupCommandError: Lancement impossible, timeout ou code retour non nul.
        """
        timeout = self._settings.backup_dump_timeout_seconds
        cmd = [
            self._settings.pg_dump_path,
            "--format=plain",
            "--no-owner",
            "--no-privileges",
        ]
        env = {**os.environ, **params.to_env()}

        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    env=env,
                )
            except OSError as e:
                raise BackupCommandError("pg_dump", f"could not start: {e}") from e

            with _Watchdog(process, timeout) as watchdog:
                with gzip.open(filepath, "wb") as compressed:
                    shutil.copyfileobj(process.stdout, compressed, CHUNK_SIZE)
                process.stdout.close()
                returncode = process.wait()

            if watchdog.fired:
                raise BackupCommandError("pg_dump", f"timed out after {timeout:g}s")

            if returncode != 0:
                raise BackupCommandError(
                    "pg_dump",
                    f"exit code {returncode}",
                    stderr=_read_stderr(stderr_file),
                )

    def _upload(self, filepath: Path, filename: str) -> bool:
        """Envoie le dump off-site. Un echec est logge, jamais propage."""
        if self._uploader is None:
            return False

        try:
            key = self._uploader.upload(filepath, filename)
        except Exception as e:
            logger.error(
                "backup_upload_failed",
                filename=filename,
                error=_error_message(e),
            )
            return False

        logger.info("backup_uploaded", filename=filename, key=key)
        return True

    def _ensure_backup_dir(self) -> None:
        if not self._backup_dir.exists():
            self._backup_dir.mkdir(parents=True, exist_ok=True)
            logger.info("backup_dir_created", path=str(self._backup_dir))

    def _remove_partial(self, filepath: Path) -> None:
        """Supprime un fichier partiel apres echec."""
        try:
            filepath.unlink(missing_ok=True)
        except OSError as e:
            logger.error(
                "backup_partial_cleanup_failed",
                filename=filepath.name,
                error=str(e),
            )

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def prune_old_backups(self, now: Optional[datetime] = None) -> int:
        """
        Supprime les backups plus vieux que la retention.

        Un fichier est supprime si son mtime est strictement anterieur
        a now - BACKUP_RETENTION_DAYS.

        Args:
            now: Instant de reference (defaut: maintenant).

        Returns:
            Nombre de fichiers supprimes.
        """
        if not self._backup_dir.is_dir():
            return 0

        now = now or datetime.now(timezone.utc)
        retention_days = self._settings.backup_retention_days
        cutoff = (now - timedelta(days=retention_days)).timestamp()
        removed = 0

        for filepath in self._backup_dir.iterdir():
            if not is_backup_filename(filepath.name):
                continue
            try:
                if filepath.is_file() and filepath.stat().st_mtime < cutoff:
                    filepath.unlink()
                    removed += 1
            except FileNotFoundError:
                continue

        if removed:
            logger.info(
                "backups_pruned",
                count=removed,
                retention_days=retention_days,
            )

        return removed

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_backups(self) -> List[BackupInfo]:
        """
        Liste les backups disponibles, le plus recent en premier.

        Returns:
            Liste de BackupInfo (vide si le repertoire n'existe pas).
        """
        if not self._backup_dir.is_dir():
            return []

        backups = []
        for filepath in self._backup_dir.iterdir():
            if not is_backup_filename(filepath.name):
                continue
            try:
                if not filepath.is_file():
                    continue
                stat = filepath.stat()
            except FileNotFoundError:
                continue
            backups.append(
                BackupInfo(
                    filename=filepath.name,
                    size_bytes=stat.st_size,
                    created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )

        backups.sort(key=lambda info: info.created_at, reverse=True)
        return backups

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def restore_backup(self, filename: str) -> RestoreResult:
        """
        Restaure un backup.

        Args:
            filename: Nom du fichier a restaurer (sans repertoire).

        Returns:
            RestoreResult avec le resultat. Ne leve jamais.

        Warning:
            Cette operation applique le SQL sur la base en service.
            Aucun snapshot de securite n'est pris avant.
        """
        start = time.monotonic()

        try:
            name = BackupFilename(filename)
        except InvalidBackupFilenameError as e:
            logger.warning("restore_rejected", reason=e.code)
            return RestoreResult.failed(e.message, filename=filename, code=e.code)

        filepath = self._backup_dir / name.value
        if not filepath.is_file():
            error = BackupNotFoundError(name.value)
            return RestoreResult.failed(error.message, filename=name.value, code=error.code)

        if not self._settings.database_url:
            error = DatabaseUrlMissingError()
            return RestoreResult.failed(error.message, filename=name.value, code=error.code)

        if not self._lock.acquire(blocking=False):
            error = BackupInProgressError()
            logger.warning("restore_skipped", filename=name.value, reason=error.code)
            return RestoreResult.failed(error.message, filename=name.value, code=error.code)

        try:
            logger.warning("restore_started", filename=name.value)
            params = parse_database_url(
                self._settings.database_url,
                production=self._settings.is_production,
            )
            self._restore_from(filepath, params)

        except Exception as e:
            message = _error_message(e)
            logger.error("restore_failed", filename=name.value, error=message)
            return RestoreResult.failed(
                message,
                filename=name.value,
                duration_ms=_elapsed_ms(start),
                code=_error_code(e),
            )

        finally:
            self._lock.release()

        duration_ms = _elapsed_ms(start)
        logger.info("restore_completed", filename=name.value, duration_ms=duration_ms)

        return RestoreResult(success=True, filename=name.value, duration_ms=duration_ms)

    def _restore_from(self, filepath: Path, params: ConnectionParams) -> None:
        """
        Decompresse filepath dans l'entree standard de psql.

        Raises:
            BackupCommandError: Lancement impossible, timeout, entree
                fermee prematurement ou code retour non nul.
        """
        timeout = self._settings.backup_restore_timeout_seconds
        cmd = [self._settings.psql_path, "--quiet", "--no-psqlrc"]
        env = {**os.environ, **params.to_env()}
        broken_pipe = False

        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.DEVNULL,
                    stderr=stderr_file,
                    env=env,
                )
            except OSError as e:
                raise BackupCommandError("psql", f"could not start: {e}") from e

            with _Watchdog(process, timeout) as watchdog:
                try:
                    with gzip.open(filepath, "rb") as source:
                        shutil.copyfileobj(source, process.stdin, CHUNK_SIZE)
                except BrokenPipeError:
                    broken_pipe = True
                finally:
                    # psql a pu fermer son entree: le code retour dira pourquoi
                    with suppress(BrokenPipeError):
                        process.stdin.close()
                returncode = process.wait()

            if watchdog.fired:
                raise BackupCommandError("psql", f"timed out after {timeout:g}s")

            if returncode != 0:
                raise BackupCommandError(
                    "psql",
                    f"exit code {returncode}",
                    stderr=_read_stderr(stderr_file),
                )

            if broken_pipe:
                raise BackupCommandError("psql", "closed its input before the end of the dump")
