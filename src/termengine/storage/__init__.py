"""Persistence backends for termengine.

History, named state stores and installed-package metadata are saved
through the :class:`KeyValueStore` interface.

Public API:
    KeyValueStore -- Abstract base class
    InMemoryKeyValueStore -- Process-lifetime dict backend
    JsonFileKeyValueStore -- Single JSON document on disk
"""

from termengine.storage.base import (
    HISTORY_KEY,
    PACKAGES_KEY,
    KeyValueStore,
    StorageError,
    state_key,
)
from termengine.storage.file import JsonFileKeyValueStore
from termengine.storage.memory import InMemoryKeyValueStore

__all__ = [
    "HISTORY_KEY",
    "PACKAGES_KEY",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "StorageError",
    "state_key",
]
