from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class MessageQueueInterface(ABC):
    """Topic-keyed work queue between click intake and storage."""

    @abstractmethod
    def publish(self, topic: str, message: Any, key: str | None = None) -> None:
        """Append *message* to *topic*. *key* is a partitioning hint for brokers that use one."""
        ...

    @abstractmethod
    def consume_one(self, topic: str) -> Any | None:
        """Non-blocking: return next message or None."""
        ...

    @abstractmethod
    def pending(self, topic: str) -> int: ...
