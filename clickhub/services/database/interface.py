from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Row = dict[str, Any]


class DatabaseInterface(ABC):
    """Row-oriented storage addressed by table name.

    Queries use positional ``$n`` placeholders filled from *params*. Rows are
    returned as copies; mutating one never changes stored data.
    """

    @abstractmethod
    def connect(self) -> None: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    def execute(self, query: str, params: list[Any] | None = None) -> int:
        """Run a statement that returns no rows; the result is the affected row count."""

    @abstractmethod
    def fetch_all(self, query: str, params: list[Any] | None = None) -> list[Row]: ...

    def fetch_one(self, query: str, params: list[Any] | None = None) -> Row | None:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None

    @abstractmethod
    def insert_one(self, table: str, row: Row) -> int: ...

    def health_check(self) -> bool:
        return self.is_connected()
