"""Registry of named state stores for one session."""

from __future__ import annotations

import logging
from typing import Any

from termengine.engine.registry import ProcessorRegistry
from termengine.processors.base import CommandProcessor
from termengine.state.store import StateStore
from termengine.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class StateStoreManager:
    """Creates state stores lazily and hands them to processors.

    Subcommands share the store of their root processor, so ``alias`` and
    ``alias ls`` see the same data.
    """

    def __init__(
        self,
        backend: KeyValueStore | None = None,
        registry: ProcessorRegistry | None = None,
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._stores: dict[str, StateStore] = {}

    def get_state_store(self, name: str, initial_state: dict[str, Any] | None = None) -> StateStore:
        """Return the store called ``name``, creating it with ``initial_state``."""
        store = self._stores.get(name)
        if store is None:
            store = StateStore(name, initial_state, self._backend)
            self._stores[name] = store
            logger.debug("Created state store %s", name)
        return store

    def get_processor_state_store(self, processor: CommandProcessor) -> StateStore:
        root = self._registry.get_root_processor(processor) if self._registry else processor
        config = root.state_configuration
        return self.get_state_store(root.store_name, config.initial_state if config else None)

    def store_entries(self) -> list[tuple[str, dict[str, Any]]]:
        """Return ``(name, state)`` for every store created so far."""
        return [(name, store.get_state()) for name, store in self._stores.items()]
