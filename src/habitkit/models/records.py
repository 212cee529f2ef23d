"""Row structs shared by every storage backend.

Both the SQLite backend and the in-memory fallback store and return these
exact types, so the row shape never depends on which backend is active.
"""

from __future__ import annotations

import datetime as dt
from typing import ClassVar, Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class HabitRecord(SQLModel, table=True):
    """One row of the ``habits`` table."""

    __tablename__: ClassVar[str] = "habits"

    id: str = Field(primary_key=True, max_length=32)
    name: str = Field(nullable=False, max_length=120)
    question: str = Field(default="", nullable=False, max_length=255)
    color: str = Field(nullable=False, max_length=32)
    type: str = Field(nullable=False, max_length=16)
    unit: Optional[str] = Field(default=None, max_length=32)
    target: Optional[float] = Field(default=None)
    target_type: Optional[str] = Field(default=None, max_length=16)
    frequency_type: str = Field(nullable=False, max_length=32)
    frequency_value: Optional[int] = Field(default=None)
    frequency_period: Optional[int] = Field(default=None)
    reminder_enabled: bool = Field(default=False, nullable=False)
    reminder_time: Optional[str] = Field(default=None, max_length=5)
    notes: Optional[str] = Field(default=None)
    # Naive, local time.
    created_at: dt.datetime = Field(sa_type=DateTime(), nullable=False, index=True)


class HabitEntryRecord(SQLModel, table=True):
    """One row of the ``habit_entries`` table: a habit on a calendar day."""

    __tablename__: ClassVar[str] = "habit_entries"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_entries_habit_date"),)

    id: str = Field(primary_key=True, max_length=32)
    habit_id: str = Field(foreign_key="habits.id", ondelete="CASCADE", nullable=False, index=True)
    date: dt.date = Field(nullable=False, index=True)
    value: str = Field(nullable=False, max_length=64)
    notes: Optional[str] = Field(default=None)


def copy_record(row):
    """Return a detached copy of a row struct."""

    return type(row)(**row.model_dump())


__all__ = ["HabitEntryRecord", "HabitRecord", "copy_record"]
