"""Constructor inspection: turns a class into an ordered list of dependencies.

Dependencies are discovered from ``__init__`` type hints. Only classes that
live outside ``builtins`` and ``typing`` count as injectable types; scalars
such as ``str`` or ``int`` are left for overrides or defaults to satisfy.
"""

from __future__ import annotations

import enum
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, get_type_hints

from clickhub.container.binding import Factory
from clickhub.container.errors import ContainerError, describe

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
# Scalars, builtin containers, and typing special forms such as Any
_NON_INJECTABLE_MODULES = frozenset({"builtins", "typing"})


@dataclass(frozen=True)
class DependencyDescriptor:
    name: str
    required_type: type | None = None
    has_default: bool = False
    default: Any = None
    keyword_only: bool = False


@dataclass(frozen=True)
class ConstructorDescription:
    instantiable: bool
    has_constructor: bool = False
    dependencies: tuple[DependencyDescriptor, ...] = ()


NOT_INSTANTIABLE = ConstructorDescription(instantiable=False)
NO_CONSTRUCTOR = ConstructorDescription(instantiable=True)


def is_directly_constructible(concrete: Any, abstract: Any) -> bool:
    """True when no indirection remains: a factory, or the id bound to itself."""
    return isinstance(concrete, Factory) or concrete == abstract


def is_instantiable(target: Any) -> bool:
    if not inspect.isclass(target):
        return False
    if issubclass(target, enum.Enum):
        return False
    if inspect.isabstract(target):
        return False
    # typing.Protocol classes themselves; concrete subclasses reset the flag
    return not getattr(target, "_is_protocol", False)


def injectable_type(hint: Any) -> type | None:
    """Class the container should resolve for *hint*, or None for scalars/untyped."""
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(members) != 1:
            return None
        hint = members[0]
    if not inspect.isclass(hint):
        return None
    if hint.__module__ in _NON_INJECTABLE_MODULES:
        return None
    return hint


def _new_takes_no_arguments(cls: type) -> bool:
    """False for classes built only through a custom or C-level ``__new__`` that needs arguments."""
    new = cls.__new__
    if new is object.__new__:
        return True
    try:
        params = list(inspect.signature(new).parameters.values())[1:]
    except (TypeError, ValueError):
        return False
    return all(param.default is not inspect.Parameter.empty for param in params)


class TypeIntrospector:
    """Describes constructors and caches the result per class."""

    def __init__(self) -> None:
        self._cache: dict[type, ConstructorDescription] = {}

    def describe(self, concrete: Any) -> ConstructorDescription:
        if not is_instantiable(concrete):
            return NOT_INSTANTIABLE
        cached = self._cache.get(concrete)
        if cached is None:
            cached = self._describe_class(concrete)
            self._cache[concrete] = cached
        return cached

    def _describe_class(self, cls: type) -> ConstructorDescription:
        init = cls.__init__
        if init is object.__init__:
            return NO_CONSTRUCTOR if _new_takes_no_arguments(cls) else NOT_INSTANTIABLE

        try:
            hints = get_type_hints(init)
        except Exception as exc:
            raise ContainerError(
                f"Cannot read type hints for {describe(cls)}.__init__: {exc}"
            ) from exc
        hints.pop("return", None)

        params = list(inspect.signature(init).parameters.values())[1:]
        dependencies = tuple(
            DependencyDescriptor(
                name=param.name,
                required_type=injectable_type(hints.get(param.name)),
                has_default=param.default is not inspect.Parameter.empty,
                default=None if param.default is inspect.Parameter.empty else param.default,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
            )
            for param in params
            if param.kind not in _SKIPPED_KINDS
        )
        return ConstructorDescription(
            instantiable=True, has_constructor=True, dependencies=dependencies
        )
