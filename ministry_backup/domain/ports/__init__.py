"""
Ports du domaine - Interfaces implementees par l'infrastructure.
"""

from ministry_backup.domain.ports.offsite_storage import OffsiteStorage

__all__ = ["OffsiteStorage"]
