"""Generate a new project from a cached template."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from mammoth.app.download.service import DownloadOrchestrator
from mammoth.domain.cache import CacheResolver
from mammoth.domain.errors import AlreadyExistsError, MammothError, NotFoundError, StorageError
from mammoth.domain.registry import Template
from mammoth.utils.fs import copy_tree

PACKAGE_JSON = "package.json"

GitInit = Callable[[Path], None]


@dataclass(frozen=True)
class ProjectSpec:
    name: str
    author: str
    description: str
    output_dir: Path
    template: Template

    @property
    def project_path(self) -> Path:
        return self.output_dir / self.name


@dataclass(frozen=True)
class GenerationResult:
    project_path: Path
    package_json_updated: bool
    git_initialised: bool
    git_error: str | None = None


def update_package_json(project_path: Path, spec: ProjectSpec) -> bool:
    """Rewrite name/author/description in package.json; False when there is none."""
    package_json = project_path / PACKAGE_JSON
    if not package_json.exists():
        return False
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StorageError(package_json, f"invalid JSON: {exc}") from exc
    except OSError as exc:
        raise StorageError(package_json, exc) from exc
    if not isinstance(data, dict):
        return False
    data["name"] = spec.name
    data["author"] = spec.author
    data["description"] = spec.description
    try:
        package_json.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise StorageError(package_json, exc) from exc
    return True


class ProjectGenerator:
    def __init__(
        self,
        orchestrator: DownloadOrchestrator,
        resolver: CacheResolver,
        *,
        git_init: GitInit | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._resolver = resolver
        self._git_init = git_init

    def generate(self, spec: ProjectSpec, *, init_git: bool = True) -> GenerationResult:
        project_path = spec.project_path
        if project_path.exists() and (not project_path.is_dir() or any(project_path.iterdir())):
            raise AlreadyExistsError("project directory", str(project_path))

        self._orchestrator.download(spec.template, force=False)
        cache_path = self._resolver.cache_path(spec.template)
        if not cache_path.is_dir():
            raise NotFoundError("cached template", spec.template.id)

        try:
            project_path.mkdir(parents=True, exist_ok=True)
            copy_tree(cache_path, project_path)
        except OSError as exc:
            raise StorageError(project_path, exc) from exc

        updated = update_package_json(project_path, spec)

        git_initialised = False
        git_error: str | None = None
        if init_git and self._git_init is not None:
            try:
                self._git_init(project_path)
                git_initialised = True
            except MammothError as exc:
                git_error = str(exc)
        return GenerationResult(
            project_path=project_path,
            package_json_updated=updated,
            git_initialised=git_initialised,
            git_error=git_error,
        )


__all__ = ["GenerationResult", "ProjectGenerator", "ProjectSpec", "update_package_json"]
