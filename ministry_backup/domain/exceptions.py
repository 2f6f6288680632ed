"""
Exceptions metier du domaine.

Ces exceptions representent les echecs connus du sous-systeme de
sauvegarde. Elles sont levees dans l'infrastructure puis converties
en resultats types (BackupResult, RestoreResult) a la frontiere
des operations run_backup / restore_backup.
"""

from typing import Any


class DomainException(Exception):
    """Exception de base pour toutes les erreurs du domaine."""

    def __init__(self, message: str, code: str | None = None) -> None:
        """
        Initialise une exception du domaine.

        Args:
            message: Message d'erreur descriptif.
            code: Code d'erreur optionnel pour identification programmatique.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidDatabaseUrlError(DomainException):
    """Leve quand DATABASE_URL ne peut pas etre decomposee."""

    def __init__(self, reason: str) -> None:
        # L'URL elle-meme n'est jamais incluse: elle contient le mot de passe
        super().__init__(
            f"Invalid DATABASE_URL: {reason}",
            code="INVALID_DATABASE_URL"
        )
        self.reason = reason


class DatabaseUrlMissingError(DomainException):
    """Leve quand DATABASE_URL n'est pas configuree."""

    def __init__(self) -> None:
        super().__init__("DATABASE_URL not configured", code="DATABASE_URL_MISSING")


class BackupInProgressError(DomainException):
    """Leve quand un dump ou une restauration est deja en cours."""

    def __init__(self) -> None:
        super().__init__(
            "Another backup or restore operation is already running",
            code="BACKUP_BUSY"
        )


class BackupTooSmallError(DomainException):
    """Leve quand le dump compresse est trop petit pour etre valide."""

    def __init__(self, size_bytes: int) -> None:
        super().__init__(
            f"Backup file suspiciously small: {size_bytes} bytes",
            code="BACKUP_TOO_SMALL"
        )
        self.size_bytes = size_bytes


class InvalidBackupFilenameError(DomainException):
    """Leve quand un nom de fichier de backup est dangereux ou hors convention."""

    def __init__(self, value: Any) -> None:
        super().__init__("Invalid filename", code="INVALID_BACKUP_FILENAME")
        self.invalid_value = value


class BackupNotFoundError(DomainException):
    """Leve quand le fichier de backup demande n'existe pas."""

    def __init__(self, filename: str) -> None:
        super().__init__(
            f"Backup file not found: {filename}",
            code="BACKUP_NOT_FOUND"
        )
        self.filename = filename


class InvalidCronExpressionError(DomainException):
    """Leve quand l'expression cron du scheduler est invalide."""

    def __init__(self, expression: str, reason: str | None = None) -> None:
        message = f"Invalid cron expression: '{expression}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message, code="INVALID_CRON_EXPRESSION")
        self.expression = expression


class OffsiteUploadError(DomainException):
    """Leve quand l'envoi vers le stockage objet echoue."""

    def __init__(self, message: str, key: str | None = None) -> None:
        full_message = message
        if key:
            full_message = f"Upload '{key}': {message}"
        super().__init__(full_message, code="OFFSITE_UPLOAD_FAILED")
        self.key = key


class BackupCommandError(DomainException):
    """Leve quand pg_dump ou psql echoue (code retour, timeout, lancement)."""

    def __init__(self, command: str, message: str, stderr: str = "") -> None:
        full_message = f"{command} failed: {message}"
        if stderr:
            full_message += f": {stderr.strip()}"
        super().__init__(full_message, code="BACKUP_COMMAND_FAILED")
        self.command = command
        self.stderr = stderr
