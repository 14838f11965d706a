"""Infrastructure Layer — database access, storage-engine policies, and logging.

Invariants:
    - Infrastructure never imports from services/
    - SQLAlchemy exceptions are mapped to core/errors.py types at this boundary
"""
