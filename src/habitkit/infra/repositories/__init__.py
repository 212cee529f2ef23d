"""Concrete repository implementations on top of a storage backend."""

from .entry import StorageEntryRepository
from .habit import StorageHabitRepository

__all__ = ["StorageEntryRepository", "StorageHabitRepository"]
