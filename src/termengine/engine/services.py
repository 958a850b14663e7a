"""Service container shared by the commands of one session."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Token-keyed registry of services.

    Example usage::

        services.set("http", client)
        client = services.get("http")
    """

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}

    def get(self, token: str) -> Any:
        """Return the service registered under ``token``.

        Raises:
            KeyError: If nothing is registered under ``token``.
        """
        try:
            return self._services[token]
        except KeyError:
            raise KeyError(f"Service not found: {token}") from None

    def set(self, token: str, value: Any) -> None:
        if token in self._services:
            logger.debug("Replacing service %s", token)
        self._services[token] = value

    def has(self, token: str) -> bool:
        return token in self._services

    def remove(self, token: str) -> None:
        self._services.pop(token, None)
