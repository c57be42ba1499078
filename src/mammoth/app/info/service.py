"""Collects registry and cache metadata for `mammoth-cli info`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from mammoth import __version__
from mammoth.domain.cache import CacheResolver
from mammoth.ports.registry_store import RegistryStore
from mammoth.settings import RuntimeSettings
from mammoth.utils.fs import directory_size


@dataclass
class InfoPayload:
    data: Dict[str, Any]


class InfoService:
    """Aggregates configuration, cache state and paths."""

    def __init__(self, settings: RuntimeSettings, store: RegistryStore, resolver: CacheResolver) -> None:
        self._settings = settings
        self._store = store
        self._resolver = resolver

    def collect(self) -> InfoPayload:
        registry = self._store.load()
        templates = []
        cached = 0
        cache_bytes = 0
        for template in registry.templates:
            is_cached = self._resolver.is_cached(template)
            entry = template.to_dict() | {"cached": is_cached}
            if is_cached:
                cached += 1
                cache_bytes += directory_size(self._resolver.cache_path(template))
            templates.append(entry)
        repositories = []
        for repo in registry.repositories:
            entry = repo.to_dict()
            if entry.pop("auth_token", None):
                entry["has_auth_token"] = True
            repositories.append(entry)
        payload: Dict[str, Any] = {
            "version": __version__,
            "repositories": repositories,
            "templates": templates,
            "statistics": {
                "repositories": len(registry.repositories),
                "templates": len(registry.templates),
                "cached_templates": cached,
                "cache_bytes": cache_bytes,
            },
            "paths": {
                "config": str(self._store.path),
                "cache": str(self._settings.cache_dir),
                "logs": str(self._settings.log_dir),
            },
            "download": {
                "clone_timeout": self._settings.download.clone_timeout,
                "sparse_timeout": self._settings.download.sparse_timeout,
                "checkout_timeout": self._settings.download.checkout_timeout,
            },
        }
        return InfoPayload(payload)
