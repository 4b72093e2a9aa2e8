"""Runtime configuration: parsed command arguments and environment settings."""

import os
from collections import ChainMap
from collections.abc import Iterator, Mapping
from typing import Any

DEFAULT_FINANCE_URL = "http://finance-service:8080"
DEFAULT_FINANCE_TIMEOUT = 30.0


class CommandArgs(Mapping[str, Any]):
    """Read-only view of the arguments one CLI command was invoked with."""

    def __init__(self, args: Mapping[str, Any]) -> None:
        self._args = dict(args)

    def __getitem__(self, key: str) -> Any:
        return self._args[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._args)

    def __len__(self) -> int:
        return len(self._args)

    def __repr__(self) -> str:
        return f"CommandArgs({self._args})"


class PlatformConfig:
    """Settings from the process environment, with per-run overrides on top."""

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._values = ChainMap(dict(overrides or {}), os.environ)

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def get_float(self, key: str, default: float) -> float:
        raw = self._values.get(key)
        if raw is None or raw == "":
            return default
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"Config value {key}={raw!r} is not a number") from exc

    @property
    def finance_url(self) -> str:
        return self.get("FINANCE_SERVICE_URL", DEFAULT_FINANCE_URL).rstrip("/")

    @property
    def finance_timeout(self) -> float:
        return self.get_float("FINANCE_SERVICE_TIMEOUT", DEFAULT_FINANCE_TIMEOUT)
