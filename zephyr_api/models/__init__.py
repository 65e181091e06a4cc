"""
Models package for Zephyr API.

Exports all SQLAlchemy models for database operations.
"""

from .storage import StoredValue

__all__ = [
    "StoredValue",
]
