from abc import ABC, abstractmethod


class SecretsInterface(ABC):
    """Named secrets, such as the key webhooks are signed with."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def require(self, key: str) -> str:
        """Like :meth:`get`, but a missing or empty value raises KeyError."""
