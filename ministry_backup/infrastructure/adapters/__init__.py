"""
Adapters d'infrastructure.

Adapters disponibles:
---------------------
- InMemoryOffsiteStorage: Stockage off-site en memoire (dev/tests)
"""

from ministry_backup.infrastructure.adapters.memory_offsite_storage import (
    InMemoryOffsiteStorage,
)

__all__ = ["InMemoryOffsiteStorage"]
