"""Habit tracking domain entities."""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from numbers import Real
from typing import Optional, Union

from ..errors import StorageError, ValidationError
from .enums import FrequencyType, HabitType, TargetType

YES = "yes"
NO = "no"

EntryValue = Union[str, float]

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def new_id() -> str:
    """Opaque identifier for a new habit or entry."""

    return uuid.uuid4().hex


def normalize_day(value: date | datetime) -> date:
    """Collapse a date or datetime to its local calendar day."""

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"expected a date or datetime, got {type(value).__name__}")


def coerce_value(value: object) -> EntryValue:
    """Return ``value`` as ``"yes"``, ``"no"`` or a float, rejecting anything else."""

    if isinstance(value, str):
        if value in (YES, NO):
            return value
        raise ValidationError(f"entry value must be 'yes', 'no' or a number, got {value!r}")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"entry value must be 'yes', 'no' or a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"entry value must be finite, got {value!r}")
    return number


def encode_value(value: EntryValue) -> str:
    """Text form written to storage."""

    value = coerce_value(value)
    if isinstance(value, str):
        return value
    if value.is_integer():
        return str(int(value))
    return repr(value)


def decode_value(text: str) -> EntryValue:
    """Inverse of :func:`encode_value`: literals first, then a float."""

    if text in (YES, NO):
        return text
    try:
        return float(text)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"stored entry value {text!r} is neither a literal nor a number") from exc


def _optional_text(name: str, value: object) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {value!r}")


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class Frequency:
    """How often a habit is meant to happen. Scheduling metadata only."""

    type: FrequencyType = FrequencyType.EVERY_DAY
    value: Optional[int] = None
    period: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            kind = FrequencyType(self.type)
        except ValueError as exc:
            raise ValidationError(f"unknown frequency type {self.type!r}") from exc
        object.__setattr__(self, "type", kind)

        if kind is FrequencyType.EVERY_DAY:
            if self.value is not None or self.period is not None:
                raise ValidationError("every_day frequency takes no value or period")
            return

        _positive_int("frequency value", self.value)
        if kind is FrequencyType.X_TIMES_IN_Y_DAYS:
            _positive_int("frequency period", self.period)
        elif self.period is not None:
            raise ValidationError(f"{kind.value} frequency takes no period")


@dataclass(frozen=True, slots=True)
class Reminder:
    """Reminder switch plus an optional ``HH:MM`` clock time."""

    enabled: bool = False
    time: Optional[str] = None

    def __post_init__(self) -> None:
        if self.time == "":
            object.__setattr__(self, "time", None)
        if self.time is not None and (not isinstance(self.time, str) or not _CLOCK_RE.match(self.time)):
            raise ValidationError(f"reminder time must look like HH:MM, got {self.time!r}")
        object.__setattr__(self, "enabled", bool(self.enabled))


@dataclass(frozen=True, slots=True)
class Habit:
    """A user-defined behavior tracked once per calendar day."""

    id: str
    name: str
    color: str
    type: HabitType
    created_at: datetime
    question: str = ""
    frequency: Frequency = field(default_factory=Frequency)
    reminder: Reminder = field(default_factory=Reminder)
    unit: Optional[str] = None
    target: Optional[float] = None
    target_type: Optional[TargetType] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("habit name must not be empty")
        if not isinstance(self.color, str):
            raise ValidationError(f"color must be a string, got {self.color!r}")
        if not isinstance(self.question, str):
            raise ValidationError(f"question must be a string, got {self.question!r}")
        if not isinstance(self.created_at, datetime):
            raise ValidationError("created_at must be a datetime")
        if not isinstance(self.frequency, Frequency):
            raise ValidationError("frequency must be a Frequency")
        if not isinstance(self.reminder, Reminder):
            raise ValidationError("reminder must be a Reminder")

        try:
            kind = HabitType(self.type)
        except ValueError as exc:
            raise ValidationError(f"unknown habit type {self.type!r}") from exc
        object.__setattr__(self, "type", kind)

        for name in ("unit", "target_type", "notes"):
            if getattr(self, name) == "":
                object.__setattr__(self, name, None)
        for name in ("unit", "notes"):
            _optional_text(name, getattr(self, name))

        if self.target_type is not None:
            try:
                object.__setattr__(self, "target_type", TargetType(self.target_type))
            except ValueError as exc:
                raise ValidationError(f"unknown target type {self.target_type!r}") from exc

        if self.target is not None:
            if isinstance(self.target, bool) or not isinstance(self.target, Real):
                raise ValidationError(f"target must be a number, got {self.target!r}")
            target = float(self.target)
            if not math.isfinite(target) or target < 0:
                raise ValidationError(f"target must be a finite non-negative number, got {self.target!r}")
            object.__setattr__(self, "target", target)

        if kind is HabitType.YES_NO and (
            self.unit is not None or self.target is not None or self.target_type is not None
        ):
            raise ValidationError("unit, target and target_type only apply to measurable habits")

    @property
    def is_measurable(self) -> bool:
        return self.type is HabitType.MEASURABLE


@dataclass(frozen=True, slots=True)
class HabitEntry:
    """The single record of a habit on one calendar day."""

    id: str
    habit_id: str
    date: date
    value: EntryValue
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", normalize_day(self.date))
        object.__setattr__(self, "value", coerce_value(self.value))
        if self.notes == "":
            object.__setattr__(self, "notes", None)
        _optional_text("notes", self.notes)

    @property
    def is_done(self) -> bool:
        return self.value == YES


__all__ = [
    "EntryValue",
    "Frequency",
    "Habit",
    "HabitEntry",
    "NO",
    "Reminder",
    "YES",
    "coerce_value",
    "decode_value",
    "encode_value",
    "new_id",
    "normalize_day",
]
