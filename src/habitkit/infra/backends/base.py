"""Storage backend protocol."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Protocol, runtime_checkable

from ..statements import FetchManyStatement, FetchOneStatement, Row, WriteStatement


@runtime_checkable
class StorageBackend(Protocol):
    """Capability interface implemented by the SQLite and in-memory backends.

    Both implementations must be indistinguishable to callers: same row
    types, same ordering, same uniqueness and cascade rules, and the same
    error categories for the same inputs.
    """

    name: str

    def apply_schema(self) -> None:
        """Create both tables and their indexes. Safe to call repeatedly."""
        ...

    def write(self, statement: WriteStatement) -> int:
        """Execute a write and return the number of affected rows."""
        ...

    def fetch_one(self, statement: FetchOneStatement) -> Optional[Row]:
        """Return a single detached row, or None."""
        ...

    def fetch_many(self, statement: FetchManyStatement) -> list[Row]:
        """Return detached rows in the order the statement defines."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes into one all-or-nothing unit."""
        ...

    def close(self) -> None:
        """Release any held resources."""
        ...
