from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, TypeVar, overload

from clickhub.container.binding import Factory
from clickhub.container.build_stack import BuildStack
from clickhub.container.errors import (
    CyclicDependency,
    NotInstantiable,
    UnresolvedDependency,
)
from clickhub.container.extenders import Extender, ExtenderSet
from clickhub.container.introspection import (
    DependencyDescriptor,
    TypeIntrospector,
    is_directly_constructible,
)
from clickhub.container.registry import Registry

T = TypeVar("T")

_NO_PARAMETERS: Mapping[str, Any] = {}


@dataclass(frozen=True)
class Resolved:
    value: Any


@dataclass(frozen=True)
class Failed:
    error: Exception


class Container:
    """Constructor-injection container.

    Register once at start-up, then resolve per request or job::

        container = Container()
        container.singleton(LoggingInterface, PrettyLogger)
        container.bind(ClickService)
        service = container.make(ClickService)

    Dependencies are matched by the type hints on ``__init__``. A binding may
    point at another identifier (alias), at a ``(container, overrides)``
    factory, or at nothing (the identifier builds itself). Shared bindings
    are cached after their first construction.
    """

    def __init__(self) -> None:
        self._registry = Registry()
        self._extenders = ExtenderSet()
        self._introspector = TypeIntrospector()
        self._build_stack = BuildStack()
        self._resolving = BuildStack()

    # ── Registration ──────────────────────────────────────────────────────

    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:
        self._registry.bind(abstract, concrete, shared)

    def singleton(self, abstract: Any, concrete: Any = None) -> None:
        self._registry.singleton(abstract, concrete)

    def instance(self, abstract: Any, value: T) -> T:
        """Store a pre-built value; it is returned as-is and never extended."""
        return self._registry.instance(abstract, value)

    def extend(self, abstract: Any, fn: Extender) -> None:
        self._extenders.extend(abstract, fn)

    def is_shared(self, abstract: Any) -> bool:
        return self._registry.is_shared(abstract)

    def has(self, abstract: Any) -> bool:
        """Check whether an identifier has a binding or a cached instance."""
        return self._registry.has(abstract)

    # ── Resolution ────────────────────────────────────────────────────────

    @overload
    def make(self, abstract: type[T], parameters: Mapping[str, Any] | None = None) -> T: ...

    @overload
    def make(self, abstract: str, parameters: Mapping[str, Any] | None = None) -> Any: ...

    def make(self, abstract: Any, parameters: Mapping[str, Any] | None = None) -> Any:
        """Resolve *abstract*, building it and its dependencies as needed.

        *parameters* satisfy constructor arguments by name for this build
        only; they are ignored when a cached instance exists.
        """
        found, cached = self._registry.cached(abstract)
        if found:
            return cached

        parameters = parameters or _NO_PARAMETERS
        with self._resolving.frame(abstract):
            concrete = self._registry.get_concrete(abstract)
            if is_directly_constructible(concrete, abstract):
                obj = self.build(concrete, parameters)
            else:
                obj = self.make(concrete, parameters)

            if self._extenders.has_extenders(abstract):
                obj = self._extenders.apply(abstract, obj, self)

        if self._registry.is_shared(abstract):
            obj = self._registry.remember(abstract, obj)
        return obj

    def build(self, concrete: Any, parameters: Mapping[str, Any] | None = None) -> Any:
        """Instantiate *concrete* directly, ignoring bindings and the cache for it."""
        parameters = parameters or _NO_PARAMETERS
        if isinstance(concrete, Factory):
            return concrete(self, parameters)

        description = self._introspector.describe(concrete)
        if not description.instantiable:
            raise NotInstantiable(concrete, self._build_stack.snapshot())

        if not description.has_constructor:
            return concrete()

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        with self._build_stack.frame(concrete):
            for dependency in description.dependencies:
                value = self._resolve_dependency(concrete, dependency, parameters)
                if dependency.keyword_only:
                    kwargs[dependency.name] = value
                else:
                    args.append(value)
        return concrete(*args, **kwargs)

    def _resolve_dependency(
        self, enclosing: Any, dependency: DependencyDescriptor, parameters: Mapping[str, Any]
    ) -> Any:
        if dependency.name in parameters:
            return parameters[dependency.name]

        if dependency.required_type is None:
            if dependency.has_default:
                return dependency.default
            raise UnresolvedDependency(dependency.name, enclosing)

        outcome = self._attempt(dependency.required_type)
        if isinstance(outcome, Resolved):
            return outcome.value
        if dependency.has_default:
            return dependency.default
        raise outcome.error

    def _attempt(self, abstract: Any) -> Resolved | Failed:
        """Resolve a nested dependency without overrides. Cycles always propagate."""
        try:
            return Resolved(self.make(abstract))
        except CyclicDependency:
            raise
        except Exception as exc:
            return Failed(exc)
