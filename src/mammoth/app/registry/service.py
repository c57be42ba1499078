"""Add/remove operations on repositories and templates.

The module-level functions are pure: they take a ``Registry`` and return a new
one, raising before anything changes when a referential check fails.
``RegistryService`` wraps them with load/save against a ``RegistryStore``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from mammoth.domain.errors import AlreadyExistsError, InUseError, NotFoundError, UnsafePathError
from mammoth.domain.registry import (
    Registry,
    Repository,
    Template,
    key_problem,
    parse_tags,
    template_path_problem,
)
from mammoth.ports.registry_store import RegistryStore

DEFAULT_BRANCH = "main"
DEFAULT_LANGUAGE = "vue"


def _require_key(kind: str, value: str) -> None:
    problem = key_problem(value)
    if problem is not None:
        raise UnsafePathError(kind, value, problem)


def add_repository(
    registry: Registry,
    name: str,
    url: str,
    branch: str = DEFAULT_BRANCH,
    *,
    auth_token: str | None = None,
    username: str | None = None,
) -> Registry:
    _require_key("repository name", name)
    if registry.repository(name) is not None:
        raise AlreadyExistsError("repository", name)
    repository = Repository(name=name, url=url, branch=branch, auth_token=auth_token, username=username)
    return registry.with_repositories([*registry.repositories, repository])


def remove_repository(registry: Registry, name: str) -> Registry:
    users = registry.templates_for(name)
    if users:
        raise InUseError(name, [template.id for template in users])
    if registry.repository(name) is None:
        raise NotFoundError("repository", name)
    return registry.with_repositories(repo for repo in registry.repositories if repo.name != name)


def add_template(
    registry: Registry,
    template_id: str,
    name: str,
    repo: str,
    path: str,
    description: str,
    language: str = DEFAULT_LANGUAGE,
    tags: str | None = None,
) -> Registry:
    _require_key("template id", template_id)
    problem = template_path_problem(path)
    if problem is not None:
        raise UnsafePathError("template path", path, problem)
    if registry.repository(repo) is None:
        raise NotFoundError("repository", repo)
    if registry.template(template_id) is not None:
        raise AlreadyExistsError("template", template_id)
    template = Template(
        id=template_id,
        name=name,
        repo=repo,
        path=path,
        description=description,
        language=language,
        tags=tuple(parse_tags(tags)),
    )
    return registry.with_templates([*registry.templates, template])


def remove_template(registry: Registry, template_id: str) -> Registry:
    if registry.template(template_id) is None:
        raise NotFoundError("template", template_id)
    return registry.with_templates(t for t in registry.templates if t.id != template_id)


@dataclass
class RegistryService:
    """Loads the registry, applies one mutation and persists the result."""

    store: RegistryStore

    def load(self) -> Registry:
        return self.store.load()

    def get_template(self, template_id: str) -> Template:
        template = self.load().template(template_id)
        if template is None:
            raise NotFoundError("template", template_id)
        return template

    def list_templates(self) -> List[Template]:
        return list(self.load().templates)

    def list_repositories(self) -> List[Repository]:
        return list(self.load().repositories)

    def add_repository(
        self,
        name: str,
        url: str,
        branch: str = DEFAULT_BRANCH,
        *,
        auth_token: str | None = None,
        username: str | None = None,
    ) -> Repository:
        registry = add_repository(
            self.load(), name, url, branch, auth_token=auth_token, username=username
        )
        self.store.save(registry)
        return registry.repositories[-1]

    def remove_repository(self, name: str) -> None:
        self.store.save(remove_repository(self.load(), name))

    def add_template(
        self,
        template_id: str,
        name: str,
        repo: str,
        path: str,
        description: str,
        language: str = DEFAULT_LANGUAGE,
        tags: str | None = None,
    ) -> Template:
        registry = add_template(self.load(), template_id, name, repo, path, description, language, tags)
        self.store.save(registry)
        return registry.templates[-1]

    def remove_template(self, template_id: str) -> None:
        self.store.save(remove_template(self.load(), template_id))
