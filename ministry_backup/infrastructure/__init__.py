"""
Infrastructure Layer - Adapters pour les services externes.

Cette couche contient les implementations concretes:
- pg_dump / psql (sous-processus)
- Stockage objet compatible S3
- APScheduler
- Configuration pydantic-settings et logging structlog
"""
