"""API key resolution.

Adapters ask a ``KeyStore`` for their credential by provider name at
construction time. Backends are swappable: environment variables for
deployments, a plain mapping for local wiring and tests.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Mapping

from llm_gateway.gateway.errors import KeyNotFoundError


class KeyStore(ABC):
    """Port for obtaining a per-vendor API key."""

    @abstractmethod
    def get_key(self, provider: str) -> str:
        """Return the API key for ``provider`` or raise KeyNotFoundError."""
        ...


class EnvKeyStore(KeyStore):
    """Reads keys from ``{PROVIDER}_API_KEY`` environment variables.

    provider="openai" → ``OPENAI_API_KEY``. Empty values count as missing.
    """

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    @staticmethod
    def var_name(provider: str) -> str:
        return f"{provider.upper()}_API_KEY"

    def get_key(self, provider: str) -> str:
        value = self._environ.get(self.var_name(provider), "")
        if not value:
            raise KeyNotFoundError(provider)
        return value


class StaticKeyStore(KeyStore):
    """Key store backed by an in-memory mapping of provider name → key."""

    def __init__(self, api_keys: Mapping[str, str] | None = None):
        self._api_keys = dict(api_keys or {})

    def get_key(self, provider: str) -> str:
        value = self._api_keys.get(provider, "")
        if not value:
            raise KeyNotFoundError(provider)
        return value
