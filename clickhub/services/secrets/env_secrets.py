from __future__ import annotations

import os
from collections import ChainMap
from typing import Mapping

from clickhub.services.secrets.interface import SecretsInterface


class EnvSecrets(SecretsInterface):
    """Secrets looked up in explicit overrides first, then the process environment.

    The environment is read at lookup time, so values exported after start-up
    are visible. An empty override still shadows the environment.
    """

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._sources = ChainMap(dict(overrides or {}), os.environ)

    def get(self, key: str) -> str | None:
        return self._sources.get(key)

    def require(self, key: str) -> str:
        value = self.get(key)
        if not value:
            raise KeyError(f"Required secret '{key}' is not set")
        return value
