"""Operations consumed by UI and state-container collaborators."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..domain.repositories import EntryRepository, HabitRepository
from ..models.habit import EntryValue, Habit, HabitEntry
from .habits import (
    MonthlyCount,
    Streak,
    calculate_score,
    calculate_streaks,
    frequency_by_weekday,
    monthly_history,
)


class HabitTracker:
    """Habit and entry operations plus statistics for a single habit."""

    def __init__(self, habits: HabitRepository, entries: EntryRepository):
        self.habits = habits
        self.entries = entries

    # Habits

    def create_habit(self, **fields: Any) -> Habit:
        return self.habits.create(**fields)

    def get_all_habits(self) -> list[Habit]:
        return self.habits.get_all()

    def get_habit_by_id(self, habit_id: str) -> Optional[Habit]:
        return self.habits.get_by_id(habit_id)

    def update_habit(self, habit_id: str, **changes: Any) -> Habit:
        return self.habits.update(habit_id, **changes)

    def delete_habit(self, habit_id: str) -> None:
        """Delete a habit; its entries go with it."""
        self.habits.delete(habit_id)

    # Entries

    def upsert_entry(
        self,
        habit_id: str,
        day: date | datetime,
        value: EntryValue,
        notes: Optional[str] = None,
    ) -> HabitEntry:
        return self.entries.upsert(habit_id, day, value, notes)

    def get_entry_by_date(self, habit_id: str, day: date | datetime) -> Optional[HabitEntry]:
        return self.entries.get_by_date(habit_id, day)

    def get_entries_for_habit(self, habit_id: str) -> list[HabitEntry]:
        return self.entries.get_all_for_habit(habit_id)

    def get_entries_in_range(
        self, habit_id: str, start: date | datetime, end: date | datetime
    ) -> list[HabitEntry]:
        return self.entries.get_in_range(habit_id, start, end)

    def delete_entry(self, entry_id: str) -> None:
        self.entries.delete(entry_id)

    def delete_entries_for_habit(self, habit_id: str) -> int:
        return self.entries.delete_all_for_habit(habit_id)

    # Statistics

    def score(
        self, habit_id: str, window_days: int, *, now: Optional[date | datetime] = None
    ) -> int:
        return calculate_score(self.get_entries_for_habit(habit_id), window_days, now=now)

    def streaks(self, habit_id: str) -> list[Streak]:
        return calculate_streaks(self.get_entries_for_habit(habit_id))

    def frequency_by_weekday(self, habit_id: str) -> list[int]:
        return frequency_by_weekday(self.get_entries_for_habit(habit_id))

    def monthly_history(
        self,
        habit_id: str,
        month_count: int = 6,
        *,
        today: Optional[date | datetime] = None,
    ) -> list[MonthlyCount]:
        return monthly_history(self.get_entries_for_habit(habit_id), month_count, today=today)


__all__ = ["HabitTracker"]
