"""
Database package.

This package contains all database-related code:
- models: SQLAlchemy ORM models
- database: Connection management and sessions
- services: Reading and writing persisted console state
"""

from database.models import Base, Setting
from database.database import DatabaseManager, get_db_manager
from database.services import SettingsService

__all__ = [
    'Base',
    'Setting',
    'SettingsService',
    'DatabaseManager',
    'get_db_manager',
]
