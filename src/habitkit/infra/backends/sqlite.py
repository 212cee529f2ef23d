"""Durable backend: SQLite through SQLModel sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ...errors import StorageError
from ...logging_config import get_logger
from ...models.records import HabitEntryRecord, HabitRecord, copy_record
from ..database import create_session_factory, init_database
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

_HABIT_MUTABLE = (
    "name",
    "question",
    "color",
    "type",
    "unit",
    "target",
    "target_type",
    "frequency_type",
    "frequency_value",
    "frequency_period",
    "reminder_enabled",
    "reminder_time",
    "notes",
)


class SQLModelBackend:
    """SQLite-backed storage that survives process restarts.

    Uniqueness of (habit_id, date) and the entry cascade are also enforced by
    the schema here; repositories do not rely on either.
    """

    name = "sqlite"

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self._active: Optional[Session] = None
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
        try:
            init_database(self.engine)
        except SQLAlchemyError as exc:
            logger.error("Schema application failed", extra={"url": str(self.engine.url)})
            raise StorageError(f"could not apply schema: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run every write in the block on one session, committed once."""
        if self._active is not None:
            yield
            return
        try:
            with self.session_factory() as session:
                self._active = session
                try:
                    yield
                finally:
                    self._active = None
        except SQLAlchemyError as exc:
            logger.error("Transaction failed", extra={"error": str(exc)})
            raise StorageError(f"transaction failed: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._active is not None:
            yield self._active
            return
        with self.session_factory() as session:
            yield session

    # Capability interface

    def write(self, statement) -> int:
        handler = self._writers.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a write statement")
        try:
            with self._session() as session:
                return handler(session, statement)
        except SQLAlchemyError as exc:
            logger.warning(
                "Write failed",
                extra={"statement": type(statement).__name__, "error": str(exc)},
            )
            raise StorageError(f"{type(statement).__name__} failed: {exc}") from exc

    def fetch_one(self, statement) -> Optional[Row]:
        handler = self._readers_one.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a single-row query")
        try:
            with self._session() as session:
                obj = handler(session, statement)
                if obj is not None:
                    session.expunge(obj)
                return obj
        except SQLAlchemyError as exc:
            raise StorageError(f"{type(statement).__name__} failed: {exc}") from exc

    def fetch_many(self, statement) -> list[Row]:
        handler = self._readers_many.get(type(statement))
        if handler is None:
            raise StorageError(f"{type(statement).__name__} is not a multi-row query")
        try:
            with self._session() as session:
                rows = list(handler(session, statement))
                for row in rows:
                    session.expunge(row)
                return rows
        except SQLAlchemyError as exc:
            raise StorageError(f"{type(statement).__name__} failed: {exc}") from exc

    # Writes

    def _insert_habit(self, session: Session, statement: InsertHabit) -> int:
        session.add(copy_record(statement.record))
        session.flush()
        return 1

    def _update_habit(self, session: Session, statement: UpdateHabit) -> int:
        current = self._select_habit(session, SelectHabit(statement.record.id))
        if current is None:
            return 0
        for name in _HABIT_MUTABLE:
            setattr(current, name, getattr(statement.record, name))
        session.add(current)
        session.flush()
        return 1

    def _delete_habit(self, session: Session, statement: DeleteHabit) -> int:
        current = self._select_habit(session, SelectHabit(statement.habit_id))
        if current is None:
            return 0
        session.delete(current)
        session.flush()
        return 1

    def _insert_entry(self, session: Session, statement: InsertEntry) -> int:
        session.add(copy_record(statement.record))
        session.flush()
        return 1

    def _update_entry_value(self, session: Session, statement: UpdateEntryValue) -> int:
        current = self._select_entry(session, SelectEntry(statement.habit_id, statement.day))
        if current is None:
            return 0
        current.value = statement.value
        current.notes = statement.notes
        session.add(current)
        session.flush()
        return 1

    def _delete_entry(self, session: Session, statement: DeleteEntry) -> int:
        current = session.exec(
            select(HabitEntryRecord).where(HabitEntryRecord.id == statement.entry_id)
        ).first()
        if current is None:
            return 0
        session.delete(current)
        session.flush()
        return 1

    def _delete_entries_for_habit(self, session: Session, statement: DeleteEntriesForHabit) -> int:
        rows = session.exec(
            select(HabitEntryRecord).where(HabitEntryRecord.habit_id == statement.habit_id)
        ).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)

    # Reads

    def _select_habit(self, session: Session, statement: SelectHabit) -> Optional[HabitRecord]:
        return session.exec(select(HabitRecord).where(HabitRecord.id == statement.habit_id)).first()

    def _select_all_habits(self, session: Session, statement: SelectAllHabits):
        return session.exec(
            select(HabitRecord).order_by(
                HabitRecord.created_at.desc(),  # type: ignore[union-attr]
                HabitRecord.id.desc(),  # type: ignore[union-attr]
            )
        ).all()

    def _select_entry(self, session: Session, statement: SelectEntry) -> Optional[HabitEntryRecord]:
        return session.exec(
            select(HabitEntryRecord)
            .where(HabitEntryRecord.habit_id == statement.habit_id)
            .where(HabitEntryRecord.date == statement.day)
        ).first()

    def _select_entries_for_habit(self, session: Session, statement: SelectEntriesForHabit):
        return session.exec(
            select(HabitEntryRecord)
            .where(HabitEntryRecord.habit_id == statement.habit_id)
            .order_by(HabitEntryRecord.date.desc())  # type: ignore[union-attr]
        ).all()

    def _select_entries_in_range(self, session: Session, statement: SelectEntriesInRange):
        return session.exec(
            select(HabitEntryRecord)
            .where(HabitEntryRecord.habit_id == statement.habit_id)
            .where(HabitEntryRecord.date >= statement.start)
            .where(HabitEntryRecord.date <= statement.end)
            .order_by(HabitEntryRecord.date)  # type: ignore[arg-type]
        ).all()


__all__ = ["SQLModelBackend"]
