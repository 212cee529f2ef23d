"""Volatile fallback backend used when SQLite is unavailable.

Mirrors the SQLite backend's observable behavior with plain dictionaries:
the same row structs, the same ordering, the same uniqueness and foreign-key
failures, and an explicit entry cascade on habit deletion.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from ...errors import StorageError
from ...logging_config import get_logger
from ...models.records import HabitEntryRecord, HabitRecord, copy_record
from ..statements import (
    DeleteEntriesForHabit,
    DeleteEntry,
    DeleteHabit,
    InsertEntry,
    InsertHabit,
    Row,
    SelectAllHabits,
    SelectEntriesForHabit,
    SelectEntriesInRange,
    SelectEntry,
    SelectHabit,
    UpdateEntryValue,
    UpdateHabit,
)

logger = get_logger(__name__)


class InMemoryBackend:
    """Dictionary-backed storage; contents are lost when the process exits.

    Stored rows are never mutated in place, so a transaction snapshot only
    needs shallow copies of the two tables.
    """

    name = "memory"

    def __init__(self) -> None:
        self._habits: dict[str, HabitRecord] = {}
        self._entries: dict[str, HabitEntryRecord] = {}
        self._schema_applied = False
        self._in_transaction = False
        self._writers = {
            InsertHabit: self._insert_habit,
            UpdateHabit: self._update_habit,
            DeleteHabit: self._delete_habit,
            InsertEntry: self._insert_entry,
            UpdateEntryValue: self._update_entry_value,
            DeleteEntry: self._delete_entry,
            DeleteEntriesForHabit: self._delete_entries_for_habit,
        }
        self._readers_one = {
            SelectHabit: self._select_habit,
            SelectEntry: self._select_entry,
        }
        self._readers_many = {
            SelectAllHabits: self._select_all_habits,
            SelectEntriesForHabit: self._select_entries_for_habit,
            SelectEntriesInRange: self._select_entries_in_range,
        }

    # Lifecycle

    def apply_schema(self) -> None:
        if not self._schema_applied:
            logger.debug("In-memory tables ready")
        self._schema_applied = True

    def close(self) -> None:
        self._habits.clear()
        self._entries.clear()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore both tables if the block raises."""
        if self._in_transaction:
            yield
            return
        snapshot = (dict(self._habits), dict(self._entries))
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self._habits, self._entries = snapshot
            raise
        finally:
            self._in_transaction = False

    # Capability interface

    def write(self, statement) -> int:
        handler = self._writers.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a write statement")
        try:
            return handler(statement)
        except StorageError as exc:
            logger.warning(
                "Write failed",
                extra={"statement": type(statement).__name__, "error": str(exc)},
            )
            raise

    def fetch_one(self, statement) -> Optional[Row]:
        handler = self._readers_one.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a single-row query")
        row = handler(statement)
        return copy_record(row) if row is not None else None

    def fetch_many(self, statement) -> list[Row]:
        handler = self._readers_many.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a multi-row query")
        return [copy_record(row) for row in handler(statement)]

    # Writes

    def _insert_habit(self, statement: InsertHabit) -> int:
        record = statement.record
        if record.id in self._habits:
            raise StorageError(f"UNIQUE constraint failed: habits.id ({record.id})")
        self._habits[record.id] = copy_record(record)
        return 1

    def _update_habit(self, statement: UpdateHabit) -> int:
        current = self._habits.get(statement.record.id)
        if current is None:
            return 0
        merged = copy_record(statement.record)
        merged.created_at = current.created_at
        self._habits[merged.id] = merged
        return 1

    def _delete_habit(self, statement: DeleteHabit) -> int:
        if self._habits.pop(statement.habit_id, None) is None:
            return 0
        # Same effect as ON DELETE CASCADE on the SQLite schema.
        self._drop_entries(statement.habit_id)
        return 1

    def _insert_entry(self, statement: InsertEntry) -> int:
        record = statement.record
        if record.habit_id not in self._habits:
            raise StorageError(f"FOREIGN KEY constraint failed: unknown habit {record.habit_id}")
        if record.id in self._entries:
            raise StorageError(f"UNIQUE constraint failed: habit_entries.id ({record.id})")
        if self._find_entry(record.habit_id, record.date) is not None:
            raise StorageError(
                f"UNIQUE constraint failed: habit_entries.habit_id, habit_entries.date "
                f"({record.habit_id}, {record.date.isoformat()})"
            )
        self._entries[record.id] = copy_record(record)
        return 1

    def _update_entry_value(self, statement: UpdateEntryValue) -> int:
        current = self._find_entry(statement.habit_id, statement.day)
        if current is None:
            return 0
        updated = copy_record(current)
        updated.value = statement.value
        updated.notes = statement.notes
        self._entries[updated.id] = updated
        return 1

    def _delete_entry(self, statement: DeleteEntry) -> int:
        return 1 if self._entries.pop(statement.entry_id, None) is not None else 0

    def _delete_entries_for_habit(self, statement: DeleteEntriesForHabit) -> int:
        return self._drop_entries(statement.habit_id)

    def _drop_entries(self, habit_id: str) -> int:
        doomed = [entry_id for entry_id, row in self._entries.items() if row.habit_id == habit_id]
        for entry_id in doomed:
            del self._entries[entry_id]
        return len(doomed)

    # Reads

    def _find_entry(self, habit_id: str, day) -> Optional[HabitEntryRecord]:
        for row in self._entries.values():
            if row.habit_id == habit_id and row.date == day:
                return row
        return None

    def _select_habit(self, statement: SelectHabit) -> Optional[HabitRecord]:
        return self._habits.get(statement.habit_id)

    def _select_entry(self, statement: SelectEntry) -> Optional[HabitEntryRecord]:
        return self._find_entry(statement.habit_id, statement.day)

    def _select_all_habits(self, statement: SelectAllHabits) -> list[HabitRecord]:
        return sorted(self._habits.values(), key=lambda row: (row.created_at, row.id), reverse=True)

    def _select_entries_for_habit(self, statement: SelectEntriesForHabit) -> list[HabitEntryRecord]:
        rows = [row for row in self._entries.values() if row.habit_id == statement.habit_id]
        return sorted(rows, key=lambda row: row.date, reverse=True)

    def _select_entries_in_range(self, statement: SelectEntriesInRange) -> list[HabitEntryRecord]:
        rows = [
            row
            for row in self._entries.values()
            if row.habit_id == statement.habit_id and statement.start <= row.date <= statement.end
        ]
        return sorted(rows, key=lambda row: row.date)


__all__ = ["InMemoryBackend"]
