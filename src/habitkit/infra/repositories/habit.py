"""Backend-agnostic implementation of the habit repository."""

from __future__ import annotations

from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Callable, Optional

from ...errors import NotFoundError, ValidationError
from ...logging_config import get_logger
from ...models.enums import HabitType
from ...models.habit import Frequency, Habit, Reminder, new_id
from ...models.records import HabitRecord
from ..backends.base import StorageBackend
from ..statements import (
    DeleteEntriesForHabit,
    DeleteHabit,
    InsertHabit,
    SelectAllHabits,
    SelectHabit,
    UpdateHabit,
)

logger = get_logger(__name__)

HABIT_FIELDS = frozenset(f.name for f in fields(Habit))


def _naive_local(moment: datetime) -> datetime:
    # SQLite drops tzinfo, so both backends store naive local time.
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def habit_to_record(habit: Habit) -> HabitRecord:
    """Flatten a habit into its row struct."""
    return HabitRecord(
        id=habit.id,
        name=habit.name,
        question=habit.question,
        color=habit.color,
        type=habit.type.value,
        unit=habit.unit,
        target=habit.target,
        target_type=habit.target_type.value if habit.target_type else None,
        frequency_type=habit.frequency.type.value,
        frequency_value=habit.frequency.value,
        frequency_period=habit.frequency.period,
        reminder_enabled=habit.reminder.enabled,
        reminder_time=habit.reminder.time,
        notes=habit.notes,
        created_at=habit.created_at,
    )


def record_to_habit(row: HabitRecord) -> Habit:
    """Rebuild a habit from its row struct."""
    return Habit(
        id=row.id,
        name=row.name,
        question=row.question,
        color=row.color,
        type=HabitType(row.type),
        unit=row.unit,
        target=row.target,
        target_type=row.target_type,
        frequency=Frequency(
            type=row.frequency_type,
            value=row.frequency_value,
            period=row.frequency_period,
        ),
        reminder=Reminder(enabled=bool(row.reminder_enabled), time=row.reminder_time),
        notes=row.notes,
        created_at=row.created_at,
    )


class StorageHabitRepository:
    """Habit CRUD on top of any :class:`StorageBackend`."""

    def __init__(self, backend: StorageBackend, *, clock: Callable[[], datetime] = datetime.now):
        self.backend = backend
        self.clock = clock

    def create(
        self,
        *,
        name: str,
        color: str,
        type: HabitType | str,
        question: str = "",
        unit: Optional[str] = None,
        target: Optional[float] = None,
        target_type: Optional[str] = None,
        frequency: Optional[Frequency] = None,
        reminder: Optional[Reminder] = None,
        notes: Optional[str] = None,
    ) -> Habit:
        """Create a new habit with a fresh id and creation timestamp."""
        habit = Habit(
            id=new_id(),
            name=name,
            question=question,
            color=color,
            type=type,
            unit=unit,
            target=target,
            target_type=target_type,
            frequency=frequency if frequency is not None else Frequency(),
            reminder=reminder if reminder is not None else Reminder(),
            notes=notes,
            created_at=_naive_local(self.clock()),
        )
        self.backend.write(InsertHabit(habit_to_record(habit)))
        logger.info("Habit created", extra={"habit_id": habit.id, "habit_type": habit.type.value})
        return habit

    def get_all(self) -> list[Habit]:
        """List all habits, newest first."""
        return [record_to_habit(row) for row in self.backend.fetch_many(SelectAllHabits())]

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        row = self.backend.fetch_one(SelectHabit(habit_id))
        return record_to_habit(row) if row is not None else None

    def update(self, habit_id: str, **changes: Any) -> Habit:
        """Merge ``changes`` over the stored habit and write the whole row back.

        Fields not named in ``changes`` keep their stored values. ``id``,
        ``created_at`` and ``type`` cannot change.
        """
        current = self.get_by_id(habit_id)
        if current is None:
            raise NotFoundError(f"Habit with id {habit_id} not found")

        unknown = set(changes) - HABIT_FIELDS
        if unknown:
            raise ValidationError(f"unknown habit fields: {', '.join(sorted(unknown))}")
        for name in ("id", "created_at"):
            if name in changes and changes[name] != getattr(current, name):
                raise ValidationError(f"habit {name} cannot be changed")
        if "type" in changes:
            try:
                requested = HabitType(changes["type"])
            except ValueError as exc:
                raise ValidationError(f"unknown habit type {changes['type']!r}") from exc
            if requested is not current.type:
                raise ValidationError("habit type is fixed at creation")

        merged = replace(current, **changes)
        if self.backend.write(UpdateHabit(habit_to_record(merged))) == 0:
            raise NotFoundError(f"Habit with id {habit_id} not found")
        logger.debug("Habit updated", extra={"habit_id": habit_id, "fields": sorted(changes)})
        return merged

    def delete(self, habit_id: str) -> None:
        """Delete a habit and every entry it owns as one unit.

        Entries go first so an interrupted run can never leave orphans.
        """
        with self.backend.transaction():
            removed = self.backend.write(DeleteEntriesForHabit(habit_id))
            deleted = self.backend.write(DeleteHabit(habit_id))
        if deleted:
            logger.info("Habit deleted", extra={"habit_id": habit_id, "entries_removed": removed})


__all__ = ["StorageHabitRepository", "habit_to_record", "record_to_habit"]
