"""
Logging Infrastructure - Logging structure avec structlog.

Usage:
------
    from ministry_backup.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("backups_pruned", count=3, retention_days=7)
"""

from ministry_backup.infrastructure.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
