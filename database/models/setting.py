"""
Setting database model for locally persisted console state.

Holds the values that must survive restarts of the console: the account,
the API key and the last selected player. One row per key.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base

# Declarative base shared by every console table
Base = declarative_base()


class Setting(Base):
    """
    Key/value setting.

    Attributes:
        key: Setting name (e.g., "account", "api_key", "selected_player")
        value: Stored value, empty string when cleared
        updated_at: When this setting was last written
    """

    __tablename__ = 'settings'

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False, default='')
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<Setting(key='{self.key}')>"

    def to_dict(self):
        """
        Convert setting to dictionary format.

        Returns:
            dict: Setting data as dictionary
        """
        return {
            'key': self.key,
            'value': self.value,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
