from __future__ import annotations

from typing import Any, Sequence


def describe(target: Any) -> str:
    """Human-readable name for an identifier (class, string, or factory)."""
    if isinstance(target, str):
        return target
    name = getattr(target, "__qualname__", None)
    if name is not None:
        return name
    return repr(target)


class ContainerError(TypeError):
    """Base class for every failure raised while resolving from the container."""


class NotInstantiable(ContainerError):
    """The concrete target is abstract, a protocol, or an unbound string id."""

    def __init__(self, target: Any, build_stack: Sequence[Any] = ()) -> None:
        self.target = target
        self.build_stack = tuple(build_stack)
        if self.build_stack:
            previous = ", ".join(describe(entry) for entry in self.build_stack)
            message = f"Target [{describe(target)}] is not instantiable while building [{previous}]."
        else:
            message = f"Target [{describe(target)}] is not instantiable."
        super().__init__(message)


class UnresolvedDependency(ContainerError):
    """A constructor parameter has no type, no override and no default."""

    def __init__(self, parameter: str, enclosing: Any) -> None:
        self.parameter = parameter
        self.enclosing = enclosing
        super().__init__(
            f"Unresolvable dependency resolving parameter '{parameter}' "
            f"of {describe(enclosing)}.__init__"
        )


class CyclicDependency(ContainerError):
    """An identifier was requested again while it was still being resolved."""

    def __init__(self, chain: Sequence[Any]) -> None:
        self.chain = tuple(chain)
        path = " -> ".join(describe(entry) for entry in self.chain)
        super().__init__(f"Circular dependency detected while resolving [{path}].")
