"""Filesystem-backed registry store."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from mammoth.domain.errors import RegistryParseError, StorageError
from mammoth.domain.registry import Registry
from mammoth.ports.registry_store import RegistryStore

_SCHEMA_RESOURCE = "registry.schema.json"
_SCHEMA_PACKAGE = "mammoth.resources"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def registry_from_payload(data: Any, *, source: Path | None = None) -> Registry:
    """Check ``data`` against the registry schema and build a ``Registry``."""
    if not isinstance(data, dict):
        raise RegistryParseError("registry must be a JSON object", source=source)
    if "repositories" not in data and "repos" in data:
        data = {**data, "repositories": data["repos"]}
        data.pop("repos")
    issues = sorted(_validator().iter_errors(data), key=lambda error: list(error.absolute_path))
    if issues:
        first = issues[0]
        location = ".".join(str(item) for item in first.absolute_path) or "<root>"
        raise RegistryParseError(f"{location}: {first.message}", source=source)
    return Registry.from_dict(data)


def dump_registry(registry: Registry) -> str:
    return json.dumps(registry.to_dict(), ensure_ascii=False, indent=2) + "\n"


class FSRegistryStore(RegistryStore):
    """Keeps the whole registry in a single JSON document.

    ``save`` overwrites the file in place; a crash mid-write can leave it
    truncated and there is no locking between concurrent invocations.
    """

    def __init__(self, registry_file: Path) -> None:
        self._path = registry_file

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Registry:
        if not self._path.exists():
            return Registry.empty()
        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(self._path, exc) from exc
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise RegistryParseError(exc, source=self._path) from exc
        return registry_from_payload(data, source=self._path)

    def save(self, registry: Registry) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(dump_registry(registry), encoding="utf-8")
        except OSError as exc:
            raise StorageError(self._path, exc) from exc


__all__ = ["FSRegistryStore", "dump_registry", "registry_from_payload"]
