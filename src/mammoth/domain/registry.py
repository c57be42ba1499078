"""Value objects describing the template registry."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import PureWindowsPath
from typing import Any, Dict, Iterable, List, Tuple


def parse_tags(text: str | None) -> List[str]:
    """Split a comma separated tag string, dropping blanks and repeated tags."""
    if not text:
        return []
    tags: List[str] = []
    for segment in text.split(","):
        tag = segment.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


_SEPARATORS = ("/", "\\")


def key_problem(value: str) -> str | None:
    """Why ``value`` cannot be used as a single directory name, or None."""
    if not value:
        return "must not be empty"
    if value in {".", ".."}:
        return "must not be '.' or '..'"
    if any(sep in value for sep in _SEPARATORS):
        return "must not contain path separators"
    if PureWindowsPath(value).drive:
        return "must not be an absolute path"
    return None


def template_path_problem(value: str) -> str | None:
    """Why ``value`` cannot be used as a path inside a checkout, or None."""
    if not value:
        return "must not be empty"
    if value.startswith(_SEPARATORS) or PureWindowsPath(value).drive:
        return "must be relative to the repository root"
    if ".." in value.replace("\\", "/").split("/"):
        return "must not contain '..' segments"
    return None


@dataclass(frozen=True)
class Repository:
    name: str
    url: str
    branch: str = "main"
    auth_token: str | None = None
    username: str | None = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.auth_token)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "url": self.url,
            "branch": self.branch,
        }
        if self.auth_token is not None:
            payload["auth_token"] = self.auth_token
        if self.username is not None:
            payload["username"] = self.username
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Repository":
        return cls(
            name=str(data.get("name", "")),
            url=str(data.get("url", "")),
            branch=str(data.get("branch", "")),
            auth_token=data.get("auth_token"),
            username=data.get("username"),
        )


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    repo: str
    path: str
    description: str = ""
    language: str = ""
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", tuple(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "repo": self.repo,
            "path": self.path,
            "description": self.description,
            "language": self.language,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        tags_value = data.get("tags") or []
        tags = [str(tag) for tag in tags_value] if isinstance(tags_value, list) else []
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            repo=str(data.get("repo", "")),
            path=str(data.get("path", "")),
            description=str(data.get("description", "") or ""),
            language=str(data.get("language", "") or ""),
            tags=tuple(tags),
        )


@dataclass(frozen=True)
class Registry:
    """Ordered collection of repositories and templates.

    The registry is an immutable value: every mutation returns a new instance,
    leaving the original untouched when an operation fails half way.
    """

    repositories: Tuple[Repository, ...] = ()
    templates: Tuple[Template, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "repositories", tuple(self.repositories))
        object.__setattr__(self, "templates", tuple(self.templates))

    @classmethod
    def empty(cls) -> "Registry":
        return cls()

    def repository(self, name: str) -> Repository | None:
        for repo in self.repositories:
            if repo.name == name:
                return repo
        return None

    def template(self, template_id: str) -> Template | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None

    def templates_for(self, repo_name: str) -> List[Template]:
        return [template for template in self.templates if template.repo == repo_name]

    def with_repositories(self, repositories: Iterable[Repository]) -> "Registry":
        return replace(self, repositories=tuple(repositories))

    def with_templates(self, templates: Iterable[Template]) -> "Registry":
        return replace(self, templates=tuple(templates))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repositories": [repo.to_dict() for repo in self.repositories],
            "templates": [template.to_dict() for template in self.templates],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registry":
        repos_raw = data.get("repositories")
        if repos_raw is None:
            repos_raw = data.get("repos", [])
        return cls(
            repositories=tuple(Repository.from_dict(item) for item in repos_raw or []),
            templates=tuple(Template.from_dict(item) for item in data.get("templates") or []),
        )


__all__ = ["Registry", "Repository", "Template", "key_problem", "parse_tags", "template_path_problem"]
