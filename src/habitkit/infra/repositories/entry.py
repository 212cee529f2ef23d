"""Backend-agnostic implementation of the habit entry repository."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ...errors import ValidationError
from ...logging_config import get_logger
from ...models.enums import HabitType
from ...models.habit import (
    EntryValue,
    HabitEntry,
    coerce_value,
    decode_value,
    encode_value,
    new_id,
    normalize_day,
)
from ...models.records import HabitEntryRecord
from ..backends.base import StorageBackend
from ..statements import (
    DeleteEntriesForHabit,
    DeleteEntry,
    InsertEntry,
    SelectEntriesForHabit,
    SelectEntriesInRange,
    SelectEntry,
    SelectHabit,
    UpdateEntryValue,
)

logger = get_logger(__name__)


def record_to_entry(row: HabitEntryRecord) -> HabitEntry:
    return HabitEntry(
        id=row.id,
        habit_id=row.habit_id,
        date=row.date,
        value=decode_value(row.value),
        notes=row.notes,
    )


def entry_to_record(entry: HabitEntry) -> HabitEntryRecord:
    return HabitEntryRecord(
        id=entry.id,
        habit_id=entry.habit_id,
        date=entry.date,
        value=encode_value(entry.value),
        notes=entry.notes,
    )


class StorageEntryRepository:
    """One entry per habit per calendar day, on top of any :class:`StorageBackend`.

    Uniqueness is enforced here by looking the day up before choosing between
    insert and update, so it holds on every backend. Two writers racing on the
    same day can interleave that lookup; the loser then fails with
    ``StorageError`` from the backend's own uniqueness check.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def upsert(
        self,
        habit_id: str,
        day: date | datetime,
        value: EntryValue,
        notes: Optional[str] = None,
    ) -> HabitEntry:
        """Insert or overwrite the entry for ``habit_id`` on ``day``.

        An existing entry keeps its id and date; only value and notes change.
        Yes/no habits take ``"yes"`` or ``"no"``; measurable habits take numbers.
        """
        day = normalize_day(day)
        value = coerce_value(value)
        self._check_value_kind(habit_id, value)

        existing = self.get_by_date(habit_id, day)
        if existing is not None:
            updated = replace(existing, value=value, notes=notes)
            statement = UpdateEntryValue(habit_id, day, encode_value(value), updated.notes)
            if self.backend.write(statement):
                return updated

        entry = HabitEntry(id=new_id(), habit_id=habit_id, date=day, value=value, notes=notes)
        self.backend.write(InsertEntry(entry_to_record(entry)))
        logger.debug("Entry created", extra={"habit_id": habit_id, "day": day})
        return entry

    def _check_value_kind(self, habit_id: str, value: EntryValue) -> None:
        habit = self.backend.fetch_one(SelectHabit(habit_id))
        if habit is None:
            # Unknown habits fail on insert like any other foreign-key violation.
            return
        measurable = habit.type == HabitType.MEASURABLE.value
        if measurable and isinstance(value, str):
            raise ValidationError(f"measurable habit {habit_id} takes a number, got {value!r}")
        if not measurable and not isinstance(value, str):
            raise ValidationError(f"yes/no habit {habit_id} takes 'yes' or 'no', got {value!r}")

    def get_by_date(self, habit_id: str, day: date | datetime) -> Optional[HabitEntry]:
        row = self.backend.fetch_one(SelectEntry(habit_id, normalize_day(day)))
        return record_to_entry(row) if row is not None else None

    def get_all_for_habit(self, habit_id: str) -> list[HabitEntry]:
        """All entries of a habit, newest date first."""
        return [record_to_entry(row) for row in self.backend.fetch_many(SelectEntriesForHabit(habit_id))]

    def get_in_range(
        self, habit_id: str, start: date | datetime, end: date | datetime
    ) -> list[HabitEntry]:
        """Entries with ``start <= date <= end``, oldest first."""
        statement = SelectEntriesInRange(habit_id, normalize_day(start), normalize_day(end))
        return [record_to_entry(row) for row in self.backend.fetch_many(statement)]

    def delete(self, entry_id: str) -> None:
        self.backend.write(DeleteEntry(entry_id))

    def delete_all_for_habit(self, habit_id: str) -> int:
        removed = self.backend.write(DeleteEntriesForHabit(habit_id))
        logger.debug("Entries deleted", extra={"habit_id": habit_id, "count": removed})
        return removed


__all__ = ["StorageEntryRepository", "entry_to_record", "record_to_entry"]
