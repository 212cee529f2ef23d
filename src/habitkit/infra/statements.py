"""Typed statements understood by every storage backend.

Repositories describe what they want with these objects; each backend
translates them into its own operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from ..models.records import HabitEntryRecord, HabitRecord


@dataclass(frozen=True, slots=True)
class InsertHabit:
    record: HabitRecord


@dataclass(frozen=True, slots=True)
class UpdateHabit:
    """Overwrite every mutable column of the habit with ``record.id``."""

    record: HabitRecord


@dataclass(frozen=True, slots=True)
class DeleteHabit:
    habit_id: str


@dataclass(frozen=True, slots=True)
class SelectHabit:
    habit_id: str


@dataclass(frozen=True, slots=True)
class SelectAllHabits:
    """All habits, newest ``created_at`` first."""


@dataclass(frozen=True, slots=True)
class InsertEntry:
    record: HabitEntryRecord


@dataclass(frozen=True, slots=True)
class UpdateEntryValue:
    habit_id: str
    day: date
    value: str
    notes: Optional[str] = None


@dataclass(frozen=True, slots=True)
class DeleteEntry:
    entry_id: str


@dataclass(frozen=True, slots=True)
class DeleteEntriesForHabit:
    habit_id: str


@dataclass(frozen=True, slots=True)
class SelectEntry:
    habit_id: str
    day: date


@dataclass(frozen=True, slots=True)
class SelectEntriesForHabit:
    """Entries of one habit, newest date first."""

    habit_id: str


@dataclass(frozen=True, slots=True)
class SelectEntriesInRange:
    """Entries of one habit with ``start <= date <= end``, oldest first."""

    habit_id: str
    start: date
    end: date


WriteStatement = Union[
    InsertHabit,
    UpdateHabit,
    DeleteHabit,
    InsertEntry,
    UpdateEntryValue,
    DeleteEntry,
    DeleteEntriesForHabit,
]
FetchOneStatement = Union[SelectHabit, SelectEntry]
FetchManyStatement = Union[SelectAllHabits, SelectEntriesForHabit, SelectEntriesInRange]
Row = Union[HabitRecord, HabitEntryRecord]

__all__ = [
    "DeleteEntriesForHabit",
    "DeleteEntry",
    "DeleteHabit",
    "FetchManyStatement",
    "FetchOneStatement",
    "InsertEntry",
    "InsertHabit",
    "Row",
    "SelectAllHabits",
    "SelectEntriesForHabit",
    "SelectEntriesInRange",
    "SelectEntry",
    "SelectHabit",
    "UpdateEntryValue",
    "UpdateHabit",
    "WriteStatement",
]
