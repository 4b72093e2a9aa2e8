from __future__ import annotations

from typing import Any, Callable

Extender = Callable[[Any, Any], Any]


class ExtenderSet:
    """Post-construction hooks, applied in registration order."""

    def __init__(self) -> None:
        self._extenders: dict[Any, list[Extender]] = {}

    def extend(self, abstract: Any, fn: Extender) -> None:
        self._extenders.setdefault(abstract, []).append(fn)

    def has_extenders(self, abstract: Any) -> bool:
        return bool(self._extenders.get(abstract))

    def apply(self, abstract: Any, obj: Any, container: Any) -> Any:
        for extender in self._extenders.get(abstract, ()):
            obj = extender(obj, container)
        return obj
