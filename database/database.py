"""
Database configuration and utilities.

This module provides database connection management, session handling,
and table creation utilities using SQLAlchemy. The console only stores a
handful of settings, so SQLite is the default backend.
"""

import os
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv
# Import Base and models to ensure they're registered
from database.models import Base

# Load environment variables
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///player_console.db"


class DatabaseManager:
    """
    Manages database connections and sessions.

    This class provides a centralized way to manage database connections,
    create sessions, and initialize the database schema.
    """

    def __init__(self, database_url: str = None):
        """
        Initialize the database manager.

        Args:
            database_url: Optional database URL. If not provided,
                         reads from DATABASE_URL environment variable and
                         falls back to a local SQLite file.
        """
        self.database_url = database_url or os.getenv('DATABASE_URL') or DEFAULT_DATABASE_URL

        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        if not self.database_url.startswith("sqlite"):
            # SQLite pools do not accept sizing arguments
            engine_kwargs.update(pool_size=5, max_overflow=10)

        self.engine = create_engine(self.database_url, **engine_kwargs)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_tables(self):
        """
        Create all tables defined in the models.

        Tables that already exist will not be modified.
        """
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all stored settings!
        """
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope for database operations.

        Usage:
            with db.session_scope() as session:
                session.add(setting)
                # Automatically commits on success, rolls back on error

        Yields:
            Session: SQLAlchemy session object
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            bool: True if connection is healthy, False otherwise
        """
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            print(f"Database health check failed: {e}")
            return False


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Get the shared database manager. Creates one on first use."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
