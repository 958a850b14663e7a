"""Command history.

An ordered log of the lines entered in a session, persisted through a
:class:`~termengine.storage.base.KeyValueStore`. Consecutive duplicates
are collapsed; non-consecutive repeats are kept.
"""

from __future__ import annotations

import logging

from termengine.storage.base import HISTORY_KEY, KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class CommandHistory:
    """Append-only command log with explicit clear.

    Args:
        backend: Persistence backend. None keeps history in memory only.
        limit: Number of newest entries kept (and persisted).
    """

    def __init__(self, backend: KeyValueStore | None = None, limit: int = 500) -> None:
        self._backend = backend
        self._limit = limit
        self._entries: list[str] = []

    async def initialize(self) -> None:
        """Load persisted history. A failing backend leaves the history empty."""
        if self._backend is None:
            return
        try:
            saved = await self._backend.get(HISTORY_KEY)
        except StorageError as e:
            logger.error("Failed to load command history: %s", e)
            return
        if isinstance(saved, list):
            self._entries = [str(entry) for entry in saved][-self._limit:]
            logger.debug("Loaded %d history entries", len(self._entries))

    async def add_command(self, text: str) -> bool:
        """Record ``text``.

        Returns:
            True if an entry was appended, False for empty text or a
            repeat of the newest entry.
        """
        command = text.strip()
        if not command:
            return False
        if self._entries and self._entries[-1] == command:
            return False
        self._entries.append(command)
        if len(self._entries) > self._limit:
            self._entries = self._entries[-self._limit:]
        await self._persist()
        return True

    def get_history(self) -> list[str]:
        return list(self._entries)

    def get_command(self, index: int) -> str | None:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def get_last_index(self) -> int:
        """Number of entries; the cursor position one past the newest entry."""
        return len(self._entries)

    async def clear_history(self) -> None:
        self._entries = []
        await self._persist()

    async def _persist(self) -> None:
        if self._backend is not None:
            await self._backend.set(HISTORY_KEY, self._entries)
