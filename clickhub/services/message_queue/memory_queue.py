from __future__ import annotations

from collections import defaultdict, deque
from typing import Any

from clickhub.services.message_queue.interface import MessageQueueInterface


class MemoryQueue(MessageQueueInterface):
    """Single-process FIFO per topic. Message keys are accepted and ignored."""

    def __init__(self) -> None:
        self._topics: defaultdict[str, deque[Any]] = defaultdict(deque)

    def publish(self, topic: str, message: Any, key: str | None = None) -> None:
        self._topics[topic].append(message)

    def consume_one(self, topic: str) -> Any | None:
        waiting = self._topics.get(topic)
        return waiting.popleft() if waiting else None

    def pending(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))
