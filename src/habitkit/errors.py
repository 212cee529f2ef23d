"""Error taxonomy shared by repositories and storage backends."""

from __future__ import annotations


class HabitKitError(Exception):
    """Base class for every error raised by habitkit."""


class StorageError(HabitKitError):
    """A storage backend failed to read or write."""


class NotFoundError(HabitKitError, LookupError):
    """The requested habit does not exist."""


class ValidationError(HabitKitError, ValueError):
    """Input rejected before it reached storage."""


__all__ = ["HabitKitError", "NotFoundError", "StorageError", "ValidationError"]
