"""Habit entry repository protocol."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ...models.habit import EntryValue, HabitEntry


class EntryRepository(Protocol):
    """Repository for the one-per-day entries of a habit."""

    def upsert(
        self,
        habit_id: str,
        day: date | datetime,
        value: EntryValue,
        notes: Optional[str] = None,
    ) -> HabitEntry:
        """Insert or overwrite the entry for ``habit_id`` on ``day``."""
        ...

    def get_by_date(self, habit_id: str, day: date | datetime) -> Optional[HabitEntry]:
        """Get the entry for a calendar day."""
        ...

    def get_all_for_habit(self, habit_id: str) -> list[HabitEntry]:
        """Get every entry of a habit, newest first."""
        ...

    def get_in_range(
        self, habit_id: str, start: date | datetime, end: date | datetime
    ) -> list[HabitEntry]:
        """Get entries within an inclusive date range, oldest first."""
        ...

    def delete(self, entry_id: str) -> None:
        """Delete a single entry."""
        ...

    def delete_all_for_habit(self, habit_id: str) -> int:
        """Delete every entry of a habit."""
        ...
