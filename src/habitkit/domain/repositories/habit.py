"""Habit repository protocol."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit entities."""

    def create(self, **fields: Any) -> Habit:
        """Create a habit, assigning its id and creation time."""
        ...

    def get_all(self) -> list[Habit]:
        """List every habit, newest first."""
        ...

    def get_by_id(self, habit_id: str) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def update(self, habit_id: str, **changes: Any) -> Habit:
        """Merge ``changes`` over the stored habit and persist the result."""
        ...

    def delete(self, habit_id: str) -> None:
        """Delete a habit together with all of its entries."""
        ...
