"""Installed plugin packages.

A package is a named group of root processors installed at runtime. The
manager registers them with the registry and records the package
metadata under the packages key of the persistence backend.
"""

from __future__ import annotations

import logging
from typing import Iterable

from termengine.domain.models import PackageInfo
from termengine.engine.errors import EngineError, VersionIncompatibleError
from termengine.engine.registry import ProcessorRegistry
from termengine.processors.base import CommandProcessor
from termengine.storage.base import PACKAGES_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class PackageError(EngineError):
    """Raised for unknown or duplicate packages."""


class PackageManager:
    """Installs and removes plugin packages for one session."""

    def __init__(self, registry: ProcessorRegistry, backend: KeyValueStore | None = None) -> None:
        self._registry = registry
        self._backend = backend
        self._installed: dict[str, list[CommandProcessor]] = {}
        self._packages: list[PackageInfo] = []

    async def get_packages(self) -> list[PackageInfo]:
        """Return recorded packages, including ones persisted by earlier sessions."""
        if self._backend is not None:
            saved = await self._backend.get(PACKAGES_KEY)
            if isinstance(saved, list):
                return [PackageInfo.model_validate(entry) for entry in saved]
        return list(self._packages)

    async def install(
        self, name: str, processors: Iterable[CommandProcessor], version: str = "1.0.0"
    ) -> PackageInfo:
        """Register ``processors`` as package ``name``.

        Nothing is registered when any processor is incompatible with the
        running host.

        Raises:
            PackageError: If a package with this name is already installed.
            VersionIncompatibleError: If a processor requires a newer host.
        """
        if name in self._installed:
            raise PackageError(f'Package with name "{name}" already exists.')

        processors = list(processors)
        try:
            for processor in processors:
                self._registry.check_versions(processor)
        except VersionIncompatibleError as e:
            logger.warning("Package %s rejected: %s", name, e)
            raise

        registered = [p for p in processors if self._registry.register_processor(p)]

        info = PackageInfo(name=name, version=version, commands=[p.command for p in registered])
        self._installed[name] = registered
        self._packages = [p for p in await self.get_packages() if p.name != name] + [info]
        await self._save()
        logger.info("Installed package %s (%s)", name, ", ".join(info.commands))
        return info

    async def uninstall(self, name: str) -> PackageInfo:
        """Unregister the processors of package ``name`` and drop its record.

        Raises:
            PackageError: If the package is not installed.
        """
        packages = await self.get_packages()
        info = next((p for p in packages if p.name == name), None)
        if info is None:
            raise PackageError(f'Package with name "{name}" not found.')

        for processor in self._installed.pop(name, []):
            self._registry.unregister_processor(processor)
        self._packages = [p for p in packages if p.name != name]
        await self._save()
        logger.info("Uninstalled package %s", name)
        return info

    async def _save(self) -> None:
        if self._backend is not None:
            await self._backend.set(PACKAGES_KEY, [p.model_dump() for p in self._packages])
