"""
Presentation Layer - Interfaces operateur.

    - api/: API admin FastAPI
"""
