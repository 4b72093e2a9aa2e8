from abc import ABC, abstractmethod
from typing import Any

LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


class LoggingInterface(ABC):
    """Structured logging; keyword arguments travel as context.

    Implementations only write records; the level helpers route through
    :meth:`log`.
    """

    @abstractmethod
    def log(self, level: str, msg: str, ctx: dict[str, Any]) -> None: ...

    def info(self, msg: str, **ctx: Any) -> None:
        self.log("INFO", msg, ctx)

    def warn(self, msg: str, **ctx: Any) -> None:
        self.log("WARN", msg, ctx)

    def error(self, msg: str, **ctx: Any) -> None:
        self.log("ERROR", msg, ctx)

    def debug(self, msg: str, **ctx: Any) -> None:
        self.log("DEBUG", msg, ctx)
