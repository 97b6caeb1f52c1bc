"""
Database Infrastructure Package for SalesAI Trainer

Exports the database manager; models and repositories live in subpackages.
"""

from app.infrastructure.db.database import DatabaseManager


__all__ = [
    "DatabaseManager",
]
