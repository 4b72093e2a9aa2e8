from __future__ import annotations

import threading
from typing import Any

from clickhub.container.binding import AliasOf, Binding, Factory, as_strategy


class Registry:
    """Bindings by abstract identifier plus the cache of shared instances.

    Mutation is expected during a single start-up phase. The one write that
    happens during ordinary resolution, caching a freshly built shared
    object, goes through :meth:`remember` which keeps the first value stored.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._instances: dict[Any, Any] = {}
        self._lock = threading.RLock()

    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:
        """Record or replace the binding. A cached instance is left in place."""
        binding = Binding(abstract, as_strategy(abstract, concrete), shared)
        with self._lock:
            self._bindings[abstract] = binding

    def singleton(self, abstract: Any, concrete: Any = None) -> None:
        self.bind(abstract, concrete, shared=True)

    def instance(self, abstract: Any, value: Any) -> Any:
        with self._lock:
            self._instances[abstract] = value
        return value

    def remember(self, abstract: Any, value: Any) -> Any:
        """Cache *value* unless another thread got there first; return the cached one."""
        with self._lock:
            return self._instances.setdefault(abstract, value)

    def cached(self, abstract: Any) -> tuple[bool, Any]:
        with self._lock:
            if abstract in self._instances:
                return True, self._instances[abstract]
        return False, None

    def binding(self, abstract: Any) -> Binding | None:
        return self._bindings.get(abstract)

    def is_shared(self, abstract: Any) -> bool:
        if abstract in self._instances:
            return True
        binding = self._bindings.get(abstract)
        return binding is not None and binding.shared

    def get_concrete(self, abstract: Any) -> Any:
        """Alias target or factory for a bound id; the id itself otherwise."""
        binding = self._bindings.get(abstract)
        if binding is None:
            return abstract
        strategy = binding.strategy
        if isinstance(strategy, AliasOf):
            return strategy.target
        if isinstance(strategy, Factory):
            return strategy
        return abstract

    def has(self, abstract: Any) -> bool:
        return abstract in self._bindings or abstract in self._instances
