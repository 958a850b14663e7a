"""Named, persisted state store.

A store holds a JSON-serializable mapping. ``update_state`` merges a
patch shallowly and notifies subscribers synchronously; persistence is
explicit through ``persist()`` so callers can batch several updates into
one write.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, AsyncIterator, Callable

from termengine.storage.base import KeyValueStore, StorageError, state_key

logger = logging.getLogger(__name__)

Projector = Callable[[dict[str, Any]], Any]
Unsubscribe = Callable[[], None]


class StateSelection:
    """A restartable stream of projected state values.

    Nothing is subscribed until iteration starts (or ``subscribe`` is
    called). Each iteration is an independent subscription that sees only
    the updates made after it began; earlier updates are not replayed.
    Closing the iterator releases its subscription. An iterator abandoned
    by ``break`` is closed when the event loop finalizes it; use
    ``contextlib.aclosing`` to release it immediately.

    Example usage::

        async for count in store.select(lambda s: s["count"]):
            print(count)
    """

    def __init__(self, store: StateStore, projector: Projector) -> None:
        self._store = store
        self._projector = projector

    def subscribe(self, callback: Callable[[Any], None]) -> Unsubscribe:
        """Call ``callback`` with the projected value on every update."""
        return self._store.subscribe(lambda state: callback(self._projector(state)))

    async def __aiter__(self) -> AsyncIterator[Any]:
        queue: asyncio.Queue[Any] = asyncio.Queue()
        unsubscribe = self.subscribe(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()


class StateStore:
    """In-memory state mirrored to a :class:`KeyValueStore` on ``persist()``."""

    def __init__(
        self,
        name: str,
        initial_state: dict[str, Any] | None = None,
        backend: KeyValueStore | None = None,
    ) -> None:
        self._name = name
        self._initial_state = copy.deepcopy(initial_state or {})
        self._state: dict[str, Any] = copy.deepcopy(self._initial_state)
        self._backend = backend
        self._listeners: list[Callable[[dict[str, Any]], None]] = []
        self._loaded = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def storage_key(self) -> str:
        return state_key(self._name)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def get_state(self) -> dict[str, Any]:
        """Return a shallow copy of the current state."""
        return dict(self._state)

    def update_state(self, patch: dict[str, Any]) -> None:
        """Shallow-merge ``patch`` into the state and notify subscribers."""
        self._state = {**self._state, **patch}
        self._notify()

    def reset(self) -> None:
        self._state = copy.deepcopy(self._initial_state)
        self._notify()

    def select(self, projector: Projector) -> StateSelection:
        return StateSelection(self, projector)

    def subscribe(self, callback: Callable[[dict[str, Any]], None]) -> Unsubscribe:
        """Register ``callback`` for every future update of the full state."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def persist(self) -> None:
        """Write the current state to the backend."""
        if self._backend is None:
            return
        await self._backend.set(self.storage_key, self._state)
        logger.debug("Persisted state store %s", self._name)

    async def initialize(self) -> None:
        """Load persisted state, keeping the defaults if the backend fails."""
        if self._loaded:
            return
        self._loaded = True
        if self._backend is None:
            return
        try:
            saved = await self._backend.get(self.storage_key)
        except StorageError as e:
            logger.error("Failed to load state for %r: %s", self._name, e)
            return
        if isinstance(saved, dict):
            self._state = saved
            self._notify()

    def _notify(self) -> None:
        snapshot = self.get_state()
        for listener in list(self._listeners):
            listener(snapshot)
