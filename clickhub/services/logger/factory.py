from __future__ import annotations

import threading

from clickhub.services.logger.interface import LoggingInterface
from clickhub.services.logger.memory_logger import MemoryLogger
from clickhub.services.logger.pretty_logger import PrettyLogger

IMPLEMENTATIONS: dict[str, type[LoggingInterface]] = {
    "pretty": PrettyLogger,
    "memory": MemoryLogger,
}


class LoggerFactory:
    """Hands out one logger per implementation name.

    Every service asks the factory rather than building its own logger, so
    all records of a process land in the same place (a single MemoryLogger
    under test).
    """

    def __init__(self, default_impl: str = "pretty") -> None:
        self._default_impl = self._checked(default_impl)
        self._instances: dict[str, LoggingInterface] = {}
        self._lock = threading.Lock()

    @property
    def default_impl(self) -> str:
        return self._default_impl

    def create(self, impl_name: str | None = None) -> LoggingInterface:
        name = self._checked(impl_name or self._default_impl)
        with self._lock:
            logger = self._instances.get(name)
            if logger is None:
                logger = self._instances[name] = IMPLEMENTATIONS[name]()
        return logger

    @staticmethod
    def _checked(name: str) -> str:
        if name not in IMPLEMENTATIONS:
            raise ValueError(
                f"Unknown logger implementation: '{name}' "
                f"(available: {', '.join(IMPLEMENTATIONS)})"
            )
        return name
