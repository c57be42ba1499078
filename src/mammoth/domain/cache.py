"""Deterministic on-disk locations for cached templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mammoth.domain.errors import UnsafePathError
from mammoth.domain.registry import Repository, Template, key_problem

TEMP_DIRNAME = ".tmp"


def _checked_key(kind: str, value: str) -> str:
    problem = key_problem(value)
    if problem is not None:
        raise UnsafePathError(kind, value, problem)
    return value


@dataclass(frozen=True)
class CacheResolver:
    cache_root: Path

    def cache_path(self, template: Template) -> Path:
        repo = _checked_key("repository name", template.repo)
        template_id = _checked_key("template id", template.id)
        return self.ensure_inside(self.cache_root / repo / template_id)

    def is_cached(self, template: Template) -> bool:
        try:
            return self.cache_path(template).is_dir()
        except UnsafePathError:
            return False

    def temp_path(self, repository: Repository) -> Path:
        # Lives outside the <repo>/<template> namespace.
        name = _checked_key("repository name", repository.name)
        return self.ensure_inside(self.cache_root / TEMP_DIRNAME / name)

    def ensure_inside(self, path: Path) -> Path:
        """Return ``path`` when it resolves strictly below the cache root."""
        root = self.cache_root.resolve()
        resolved = path.resolve()
        if resolved == root or not resolved.is_relative_to(root):
            raise UnsafePathError("cache path", str(path), "escapes the cache root")
        return path


__all__ = ["CacheResolver", "TEMP_DIRNAME"]
