"""
Tests unitaires pour la configuration du logging.
"""

import logging

import structlog

from ministry_backup.infrastructure.logging import configure_logging, get_logger
from ministry_backup.infrastructure.logging.config import REDACTED, redact_secrets


class TestRedactSecrets:
    """Tests pour le processor redact_secrets."""

    def test_masks_sensitive_keys(self):
        event = {
            "event": "backup_started",
            "password": "hunter2",
            "s3_secret_access_key": "abc",
            "admin_api_token": "t0ken",
            "database_url": "postgresql://u:p@h/d",
        }

        result = redact_secrets(None, "info", event)

        assert result["password"] == REDACTED
        assert result["s3_secret_access_key"] == REDACTED
        assert result["admin_api_token"] == REDACTED
        assert result["database_url"] == REDACTED
        assert result["event"] == "backup_started"

    def test_keeps_regular_keys(self):
        event = {"event": "backup_created", "filename": "backup_x.sql.gz", "size_bytes": 10}

        assert redact_secrets(None, "info", dict(event)) == event

    def test_case_insensitive(self):
        result = redact_secrets(None, "info", {"PGPASSWORD": "x"})

        assert result["PGPASSWORD"] == REDACTED


class TestConfigureLogging:
    """Tests pour configure_logging."""

    def test_processor_installed(self):
        configure_logging(json_logs=True, log_level="DEBUG")

        assert redact_secrets in structlog.get_config()["processors"]

    def test_third_party_loggers_are_quiet(self):
        """APScheduler et boto ne loggent qu'a partir de WARNING."""
        configure_logging()

        for name in ("apscheduler", "botocore", "boto3", "s3transfer"):
            assert logging.getLogger(name).level == logging.WARNING

    def test_get_logger(self):
        logger = get_logger("ministry_backup.test")

        assert logger is not None
