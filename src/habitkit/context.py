"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import BaseConfig
from .infra.backends import StorageBackend, open_storage
from .infra.repositories import StorageEntryRepository, StorageHabitRepository
from .logging_config import setup_logging
from .services.tracker import HabitTracker


@dataclass
class AppContext:
    """Storage handle plus the repositories and tracker built on it."""

    config: BaseConfig
    backend: StorageBackend
    habit_repo: StorageHabitRepository
    entry_repo: StorageEntryRepository
    tracker: HabitTracker

    @property
    def durable(self) -> bool:
        """False when running on the volatile in-memory fallback."""
        return self.backend.name != "memory"


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    backend: Optional[StorageBackend] = None,
    configure_logging: bool = False,
) -> AppContext:
    """Create the context, opening process-wide storage unless ``backend`` is given.

    With ``configure_logging`` the ``habitkit`` logger is set up before storage
    is opened, so backend selection is captured in the log file.
    """

    if config is None:
        config = BaseConfig()
    if configure_logging:
        setup_logging(config)
    if backend is None:
        backend = open_storage(config)

    habit_repo = StorageHabitRepository(backend)
    entry_repo = StorageEntryRepository(backend)

    return AppContext(
        config=config,
        backend=backend,
        habit_repo=habit_repo,
        entry_repo=entry_repo,
        tracker=HabitTracker(habit_repo, entry_repo),
    )


__all__ = ["AppContext", "create_app_context"]
