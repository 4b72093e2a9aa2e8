"""Binding strategies: how an abstract identifier turns into an object.

Callers rarely build these by hand. ``Container.bind`` accepts a class, a
string id, a ``(container, overrides)`` callable or ``None`` and normalises
it with :func:`as_strategy`.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

FactoryFn = Callable[[Any, Mapping[str, Any]], Any]


@dataclass(frozen=True)
class SelfConstruct:
    """The abstract identifier is itself the concrete type to build."""


@dataclass(frozen=True)
class AliasOf:
    """Redirect resolution to another (possibly abstract) identifier."""

    target: Any


@dataclass(frozen=True)
class Factory:
    """Opaque constructor; receives the container and the override map."""

    fn: FactoryFn

    def __call__(self, container: Any, parameters: Mapping[str, Any]) -> Any:
        return self.fn(container, parameters)


Strategy = Union[SelfConstruct, AliasOf, Factory]


@dataclass(frozen=True)
class Binding:
    abstract: Any
    strategy: Strategy
    shared: bool = False


def as_strategy(abstract: Any, concrete: Any) -> Strategy:
    """Normalise whatever was passed to ``bind`` into a strategy object."""
    if isinstance(concrete, (SelfConstruct, AliasOf, Factory)):
        return concrete
    if concrete is None or concrete == abstract:
        return SelfConstruct()
    if inspect.isclass(concrete) or isinstance(concrete, str):
        return AliasOf(concrete)
    if callable(concrete):
        return Factory(concrete)
    raise TypeError(
        f"Cannot bind {concrete!r}: expected a class, a string id, "
        "or a (container, overrides) callable"
    )
