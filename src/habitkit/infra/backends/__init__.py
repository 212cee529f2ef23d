"""Storage backends and the one-time backend selection gate."""

from __future__ import annotations

import threading
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ...config import BaseConfig
from ...errors import StorageError
from ...logging_config import get_logger
from ..database import create_db_engine
from .base import StorageBackend
from .memory import InMemoryBackend
from .sqlite import SQLModelBackend

logger = get_logger(__name__)

_lock = threading.Lock()
_handle: Optional[StorageBackend] = None


def _open_sqlite(config: BaseConfig) -> SQLModelBackend:
    try:
        engine = create_db_engine(config)
    except (SQLAlchemyError, ImportError, ValueError) as exc:
        raise StorageError(f"could not create engine for {config.DATABASE_URL}: {exc}") from exc
    backend = SQLModelBackend(engine)
    try:
        backend.apply_schema()
    except StorageError:
        backend.close()
        raise
    return backend


def _open_memory() -> InMemoryBackend:
    backend = InMemoryBackend()
    backend.apply_schema()
    return backend


def select_backend(config: BaseConfig) -> StorageBackend:
    """Build a ready-to-use backend according to ``config.STORAGE_BACKEND``.

    ``auto`` prefers SQLite and falls back to memory when it cannot be opened;
    ``sqlite`` surfaces the failure instead.
    """
    choice = config.STORAGE_BACKEND
    if choice == "memory":
        backend: StorageBackend = _open_memory()
    elif choice == "sqlite":
        backend = _open_sqlite(config)
    else:
        try:
            backend = _open_sqlite(config)
        except StorageError as exc:
            logger.warning(
                "Durable storage unavailable, using in-memory fallback",
                extra={"url": config.DATABASE_URL, "error": str(exc)},
            )
            backend = _open_memory()
    logger.info("Storage backend selected", extra={"backend": backend.name, "requested": choice})
    return backend


def open_storage(config: Optional[BaseConfig] = None) -> StorageBackend:
    """Return the process-wide storage handle, creating it on first call.

    Selection and schema application run at most once per process; later
    calls return the same handle and ignore ``config``.
    """
    global _handle  # noqa: PLW0603
    if _handle is not None:
        return _handle
    with _lock:
        if _handle is None:
            _handle = select_backend(config or BaseConfig())
    return _handle


def reset_storage() -> None:
    """Close and forget the process-wide handle."""
    global _handle  # noqa: PLW0603
    with _lock:
        if _handle is not None:
            _handle.close()
        _handle = None


__all__ = [
    "InMemoryBackend",
    "SQLModelBackend",
    "StorageBackend",
    "open_storage",
    "reset_storage",
    "select_backend",
]
