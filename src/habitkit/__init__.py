"""habitkit: habit and daily entry storage with completion statistics."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .context import AppContext, create_app_context
from .errors import HabitKitError, NotFoundError, StorageError, ValidationError
from .infra.backends import open_storage, reset_storage
from .models import (
    Frequency,
    FrequencyType,
    Habit,
    HabitEntry,
    HabitType,
    Reminder,
    TargetType,
)
from .services.tracker import HabitTracker

__all__ = [
    "AppContext",
    "BaseConfig",
    "DevConfig",
    "Frequency",
    "FrequencyType",
    "Habit",
    "HabitEntry",
    "HabitKitError",
    "HabitTracker",
    "HabitType",
    "NotFoundError",
    "Reminder",
    "StorageError",
    "TargetType",
    "TestConfig",
    "ValidationError",
    "create_app_context",
    "open_storage",
    "reset_storage",
]
