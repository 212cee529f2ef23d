"""Repository protocol definitions for domain layer."""

from .entry import EntryRepository
from .habit import HabitRepository

__all__ = ["EntryRepository", "HabitRepository"]
