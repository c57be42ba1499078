"""Port definitions for registry persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from mammoth.domain.registry import Registry


class RegistryStore(ABC):
    @property
    @abstractmethod
    def path(self) -> Path:
        """Location of the backing file."""

    @abstractmethod
    def load(self) -> Registry:
        """Return the persisted registry, or an empty one when nothing is stored."""

    @abstractmethod
    def save(self, registry: Registry) -> None:
        """Overwrite the persisted registry."""
