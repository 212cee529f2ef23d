"""Entity and row exports."""

from .enums import FrequencyType, HabitType, TargetType
from .habit import NO, YES, EntryValue, Frequency, Habit, HabitEntry, Reminder
from .records import HabitEntryRecord, HabitRecord

__all__ = [
    "EntryValue",
    "Frequency",
    "FrequencyType",
    "Habit",
    "HabitEntry",
    "HabitEntryRecord",
    "HabitRecord",
    "HabitType",
    "NO",
    "Reminder",
    "TargetType",
    "YES",
]
