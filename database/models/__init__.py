"""
Database models package.

Importing this package ensures all models are registered with the Base metadata.
"""

from database.models.setting import Base, Setting

__all__ = ['Base', 'Setting']
