"""
Ministry Backup - Sauvegardes PostgreSQL automatisees de la plateforme.

Structure:
    - domain/: Resultats, convention de nommage, exceptions, ports
    - infrastructure/: pg_dump/psql, S3, scheduler, configuration, logging
    - presentation/: API admin FastAPI
    - cli: Ligne de commande et worker
"""

__version__ = "1.0.0"
