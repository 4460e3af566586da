"""
Database entry points shared by models and migrations.
"""

from event_registration.core.database_manager import Base, db_manager

__all__ = ["Base", "db_manager"]
