"""
Tests unitaires pour les Exceptions du domaine.
"""


from ministry_backup.domain.exceptions import (
    BackupCommandError,
    BackupInProgressError,
    BackupNotFoundError,
    BackupTooSmallError,
    DatabaseUrlMissingError,
    DomainException,
    InvalidBackupFilenameError,
    InvalidCronExpressionError,
    InvalidDatabaseUrlError,
    OffsiteUploadError,
)


class TestDomainException:
    """Tests pour DomainException."""

    def test_create_with_message_only(self):
        """Test creation avec message seul."""
        exc = DomainException("Test error")
        assert exc.message == "Test error"
        assert exc.code == "DomainException"

    def test_create_with_code(self):
        """Test creation avec code."""
        exc = DomainException("Test error", code="TEST_CODE")
        assert exc.code == "TEST_CODE"

    def test_str_representation(self):
        """Test representation string."""
        exc = DomainException("Test error", code="TEST")
        assert str(exc) == "[TEST] Test error"


class TestBackupExceptions:
    """Tests pour les exceptions du sous-systeme de backup."""

    def test_all_inherit_domain_exception(self):
        for exc in (
            InvalidDatabaseUrlError("empty value"),
            DatabaseUrlMissingError(),
            BackupInProgressError(),
            BackupTooSmallError(20),
            InvalidBackupFilenameError("../x"),
            BackupNotFoundError("backup_x.sql.gz"),
            InvalidCronExpressionError("* *"),
            OffsiteUploadError("denied"),
            BackupCommandError("pg_dump", "exit code 1"),
        ):
            assert isinstance(exc, DomainException)

    def test_invalid_database_url_hides_url(self):
        exc = InvalidDatabaseUrlError("unsupported scheme 'mysql'")
        assert exc.code == "INVALID_DATABASE_URL"
        assert exc.message == "Invalid DATABASE_URL: unsupported scheme 'mysql'"

    def test_database_url_missing(self):
        exc = DatabaseUrlMissingError()
        assert exc.message == "DATABASE_URL not configured"
        assert exc.code == "DATABASE_URL_MISSING"

    def test_backup_too_small(self):
        exc = BackupTooSmallError(20)
        assert exc.size_bytes == 20
        assert "suspiciously small: 20 bytes" in exc.message

    def test_invalid_filename_keeps_value(self):
        exc = InvalidBackupFilenameError("../etc/passwd")
        assert exc.message == "Invalid filename"
        assert exc.invalid_value == "../etc/passwd"

    def test_backup_not_found(self):
        exc = BackupNotFoundError("backup_2024-01-01_03-00-00.sql.gz")
        assert exc.message == "Backup file not found: backup_2024-01-01_03-00-00.sql.gz"
        assert exc.code == "BACKUP_NOT_FOUND"

    def test_invalid_cron_with_reason(self):
        exc = InvalidCronExpressionError("61 * * * *", "bad minute")
        assert exc.expression == "61 * * * *"
        assert exc.message == "Invalid cron expression: '61 * * * *' (bad minute)"

    def test_offsite_upload_with_key(self):
        exc = OffsiteUploadError("AccessDenied", key="backups/backup_x.sql.gz")
        assert exc.message == "Upload 'backups/backup_x.sql.gz': AccessDenied"
        assert exc.key == "backups/backup_x.sql.gz"

    def test_command_error_appends_stderr(self):
        exc = BackupCommandError("psql", "exit code 2", stderr="FATAL: no role\n")
        assert exc.message == "psql failed: exit code 2: FATAL: no role"
        assert exc.command == "psql"

    def test_command_error_without_stderr(self):
        exc = BackupCommandError("pg_dump", "timed out after 300s")
        assert exc.message == "pg_dump failed: timed out after 300s"
