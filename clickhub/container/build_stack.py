from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator

from clickhub.container.errors import CyclicDependency


class BuildStack:
    """Per-thread trace of identifiers currently being constructed.

    Only surfaces through error messages. Each thread sees its own stack so
    independent resolutions never interleave their diagnostics.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    @property
    def _entries(self) -> list[Any]:
        entries = getattr(self._local, "entries", None)
        if entries is None:
            entries = []
            self._local.entries = entries
        return entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry: Any) -> bool:
        return entry in self._entries

    def snapshot(self) -> tuple[Any, ...]:
        return tuple(self._entries)

    @contextmanager
    def frame(self, entry: Any) -> Iterator[None]:
        """Push *entry* for the duration of the block; pops on success and failure."""
        entries = self._entries
        if entry in entries:
            raise CyclicDependency([*entries[entries.index(entry):], entry])
        entries.append(entry)
        try:
            yield
        finally:
            entries.pop()
