"""Remove cached templates and, optionally, the registry file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mammoth.domain.errors import StorageError
from mammoth.domain.registry import Registry
from mammoth.ports.registry_store import RegistryStore
from mammoth.settings import RuntimeSettings
from mammoth.utils.fs import remove_tree


@dataclass
class CleanupReport:
    cache_dir: Path
    cache_removed: bool
    config_removed: bool
    registry: Registry | None = None


@dataclass
class CleanupService:
    settings: RuntimeSettings
    store: RegistryStore

    def clean(self, *, include_config: bool = False) -> CleanupReport:
        cache_dir = self.settings.cache_dir
        limits = self.settings.download
        cache_removed = False
        try:
            if cache_dir.exists():
                remove_tree(cache_dir, attempts=limits.removal_attempts, backoff=limits.removal_backoff)
                cache_removed = True
            cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(cache_dir, exc) from exc

        config_removed = False
        registry: Registry | None = None
        if include_config:
            registry_file = self.store.path
            if registry_file.exists():
                try:
                    registry_file.unlink()
                except OSError as exc:
                    raise StorageError(registry_file, exc) from exc
                config_removed = True
            registry = Registry.empty()
        return CleanupReport(
            cache_dir=cache_dir,
            cache_removed=cache_removed,
            config_removed=config_removed,
            registry=registry,
        )
