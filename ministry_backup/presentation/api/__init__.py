"""
API REST admin - FastAPI.

Routers disponibles:
--------------------
- backups: Listing, backup manuel, restauration, scheduler

Usage:
------
    uvicorn --factory ministry_backup.presentation.api.main:create_app --reload
"""

from ministry_backup.presentation.api.main import create_app

__all__ = ["create_app"]
