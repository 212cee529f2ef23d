"""Library configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ValidationError

load_dotenv()

STORAGE_CHOICES = frozenset({"auto", "sqlite", "memory"})


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "habitkit"
    DB_FILENAME = "habitkit.db"
    SQLITE_PRAGMAS = {"journal_mode": "wal", "foreign_keys": "on"}

    def __init__(self) -> None:
        self.DEV_MODE = _env_bool("HABITKIT_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("HABITKIT_DATABASE_URL", self._build_sqlite_url())
        self.STORAGE_BACKEND = self._resolve_storage_backend()

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITKIT_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected locations fall back to user-local storage.
            local_data = os.getenv("XDG_DATA_HOME") or (Path.home() / ".local" / "share")
            fallback_path = Path(local_data).expanduser() / self.APP_NAME
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _resolve_storage_backend(self) -> str:
        choice = os.getenv("HABITKIT_STORAGE_BACKEND", "auto").strip().lower()
        if choice not in STORAGE_CHOICES:
            raise ValidationError(
                f"HABITKIT_STORAGE_BACKEND must be one of {sorted(STORAGE_CHOICES)}, got {choice!r}"
            )
        return choice

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside DATA_DIR."""

        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""


class TestConfig(BaseConfig):
    """Configuration for test runs rooted in a throwaway directory."""

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, data_dir: Path | str, storage_backend: str = "auto") -> None:
        self._data_root = Path(data_dir)
        super().__init__()
        self.DATABASE_URL = self._build_sqlite_url()
        if storage_backend not in STORAGE_CHOICES:
            raise ValidationError(f"unknown storage backend {storage_backend!r}")
        self.STORAGE_BACKEND = storage_backend

    def _resolve_data_dir(self) -> Path:
        self._data_root.mkdir(parents=True, exist_ok=True)
        return self._data_root.resolve()


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "STORAGE_CHOICES"]
