from clickhub.container.binding import AliasOf, Binding, Factory, SelfConstruct
from clickhub.container.container import Container
from clickhub.container.errors import (
    ContainerError,
    CyclicDependency,
    NotInstantiable,
    UnresolvedDependency,
)

__all__ = [
    "AliasOf",
    "Binding",
    "Container",
    "ContainerError",
    "CyclicDependency",
    "Factory",
    "NotInstantiable",
    "SelfConstruct",
    "UnresolvedDependency",
]
