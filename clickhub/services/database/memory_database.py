import operator
import re
from typing import Any, Callable

from clickhub.services.database.interface import DatabaseInterface

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
}

_SELECT = re.compile(r"(?is)^\s*SELECT\s+\*\s+FROM\s+(\w+)(?:\s+WHERE\s+(.+?))?\s*;?\s*$")
_CREATE_TABLE = re.compile(r"(?is)^\s*CREATE\s+TABLE\s+(IF\s+NOT\s+EXISTS\s+)?(\w+)\b.*$")
_CONDITION = re.compile(r"^\s*(\w+)\s*(>=|<=|=|>|<)\s*\$(\d+)\s*$")


class MemoryDatabase(DatabaseInterface):
    """In-memory database for unit testing.

    Tables are lists of dicts. ``CREATE TABLE [IF NOT EXISTS] t (...)``
    registers an empty table; column definitions are not enforced. Queries
    are ``SELECT * FROM t`` with an optional WHERE clause made of
    ``col op $n`` conditions joined by AND, where op is one of ``= >= <= > <``.
    """

    def __init__(self) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._connected = False

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def execute(self, query: str, params: list[Any] | None = None) -> int:
        self._check_connected()
        match = _CREATE_TABLE.match(query)
        if not match:
            raise ValueError(f"MemoryDatabase cannot run statement: {query!r}")
        if_not_exists, table = match.group(1), match.group(2)
        if table in self._tables:
            if if_not_exists:
                return 0
            raise ValueError(f"Table '{table}' already exists")
        self._tables[table] = []
        return 0

    def fetch_all(self, query: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        self._check_connected()
        match = _SELECT.match(query)
        if not match:
            raise ValueError(f"MemoryDatabase cannot run query: {query!r}")
        table, where = match.group(1), match.group(2)
        predicate = self._predicate(where, params or [])
        return [dict(r) for r in self._tables.get(table, []) if predicate(r)]

    def insert_one(self, table: str, row: dict[str, Any]) -> int:
        self._check_connected()
        self._tables.setdefault(table, []).append(dict(row))
        return 1

    def _check_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("Database is not connected. Call connect() first.")

    @staticmethod
    def _predicate(where: str | None, params: list[Any]) -> Callable[[dict[str, Any]], bool]:
        if not where:
            return lambda row: True
        checks: list[tuple[str, Callable[[Any, Any], bool], Any]] = []
        for clause in re.split(r"(?i)\s+AND\s+", where):
            cond = _CONDITION.match(clause)
            if not cond:
                raise ValueError(f"MemoryDatabase cannot evaluate condition: {clause!r}")
            column, op, index = cond.group(1), cond.group(2), int(cond.group(3))
            if index < 1 or index > len(params):
                raise ValueError(f"Missing parameter ${index} for condition {clause!r}")
            checks.append((column, _OPERATORS[op], params[index - 1]))

        def matches(row: dict[str, Any]) -> bool:
            for column, compare, value in checks:
                if column not in row or row[column] is None:
                    return False
                if not compare(row[column], value):
                    return False
            return True

        return matches
