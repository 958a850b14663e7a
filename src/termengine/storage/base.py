"""Abstract base class for persistence backends.

All key/value backends must conform to this interface, enabling the
engine to swap between an in-memory store (tests, ephemeral sessions)
and a file-backed store without changing history or state-store code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from termengine.engine.errors import EngineError

logger = logging.getLogger(__name__)

# Keys used by the engine itself
HISTORY_KEY = "cli-command-history"
PACKAGES_KEY = "cli-installed-packages"
STATE_KEY_PREFIX = "store-state-"


def state_key(store_name: str) -> str:
    """Storage key of a named state store."""
    return f"{STATE_KEY_PREFIX}{store_name}"


class KeyValueStore(ABC):
    """Abstract interface for persisting JSON-serializable values by key.

    Example usage::

        store = JsonFileKeyValueStore("~/.termengine/storage.json")
        await store.set("cli-command-history", ["echo hi"])
        history = await store.get("cli-command-history")
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under ``key``, or None when absent.

        Raises:
            StorageError: If the backend cannot be read.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the value is not JSON-serializable or the
                backend cannot be written.
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key."""
        ...


class StorageError(EngineError):
    """Raised when a persistence backend fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
