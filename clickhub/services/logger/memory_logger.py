from dataclasses import dataclass, field
from typing import Any

from clickhub.services.logger.interface import LoggingInterface


@dataclass(frozen=True)
class LogEntry:
    level: str
    msg: str
    ctx: dict[str, Any] = field(default_factory=dict)


class MemoryLogger(LoggingInterface):
    """Keeps every record in order so tests can assert on what was logged."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def log(self, level: str, msg: str, ctx: dict[str, Any]) -> None:
        self.entries.append(LogEntry(level, msg, dict(ctx)))

    @property
    def messages(self) -> list[str]:
        return [e.msg for e in self.entries]

    def at(self, level: str) -> list[LogEntry]:
        """Entries logged at *level* (INFO, WARN, ERROR, DEBUG)."""
        return [e for e in self.entries if e.level == level]
