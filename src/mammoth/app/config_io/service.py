"""Validation, import (merge/overwrite) and export of registry files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from mammoth.adapters.fs_registry_store import dump_registry, registry_from_payload
from mammoth.domain.errors import InvalidModeError, RegistryParseError, StorageError, ValidationFailedError
from mammoth.domain.registry import Registry, Repository, Template, key_problem, template_path_problem
from mammoth.ports.registry_store import RegistryStore

MODE_MERGE = "merge"
MODE_OVERWRITE = "overwrite"
IMPORT_MODES = (MODE_MERGE, MODE_OVERWRITE)
YAML_SUFFIXES = {".yaml", ".yml"}


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ValidationFailedError(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass
class ImportResult:
    registry: Registry
    mode: str
    repositories_merged: int
    templates_merged: int
    report: ValidationReport | None = None


@dataclass
class ExportResult:
    path: Path
    repositories: int
    templates: int
    include_cache_info: bool = False


def validate(registry: Registry) -> ValidationReport:
    """Collect every structural error and dangling-reference warning."""
    report = ValidationReport()
    for repo in registry.repositories:
        if not repo.name:
            report.errors.append("Repository name cannot be empty")
        elif (problem := key_problem(repo.name)) is not None:
            report.errors.append(f"Repository name '{repo.name}' {problem}")
        if not repo.url:
            report.errors.append(f"Repository '{repo.name}' URL cannot be empty")
        if not repo.branch:
            report.errors.append(f"Repository '{repo.name}' branch cannot be empty")

    known_repos = {repo.name for repo in registry.repositories}
    for template in registry.templates:
        if not template.id:
            report.errors.append("Template ID cannot be empty")
        elif (problem := key_problem(template.id)) is not None:
            report.errors.append(f"Template ID '{template.id}' {problem}")
        if not template.name:
            report.errors.append(f"Template '{template.id}' name cannot be empty")
        if not template.repo:
            report.errors.append(f"Template '{template.id}' repository cannot be empty")
        if not template.path:
            report.errors.append(f"Template '{template.id}' path cannot be empty")
        elif (problem := template_path_problem(template.path)) is not None:
            report.errors.append(f"Template '{template.id}' path '{template.path}' {problem}")
        if template.repo not in known_repos:
            report.warnings.append(
                f"Template '{template.id}' references non-existent repository '{template.repo}'"
            )
    return report


def normalise_mode(mode: str) -> str:
    value = (mode or "").strip().lower()
    if value not in IMPORT_MODES:
        raise InvalidModeError(mode)
    return value


def load_registry_file(path: Path) -> Registry:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(path, exc) from exc
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise RegistryParseError(exc, source=path) from exc
    return registry_from_payload(data, source=path)


def merge(current: Registry, incoming: Registry) -> Tuple[Registry, int, int]:
    """Upsert ``incoming`` into ``current`` keyed by repository name and template id."""
    repositories: List[Repository] = list(current.repositories)
    repo_index = {repo.name: idx for idx, repo in enumerate(repositories)}
    for repo in incoming.repositories:
        if repo.name in repo_index:
            idx = repo_index[repo.name]
            existing = repositories[idx]
            repositories[idx] = Repository(
                name=existing.name,
                url=repo.url,
                branch=repo.branch,
                auth_token=existing.auth_token,
                username=existing.username,
            )
        else:
            repo_index[repo.name] = len(repositories)
            repositories.append(repo)

    templates: List[Template] = list(current.templates)
    template_index = {template.id: idx for idx, template in enumerate(templates)}
    for template in incoming.templates:
        if template.id in template_index:
            templates[template_index[template.id]] = template
        else:
            template_index[template.id] = len(templates)
            templates.append(template)

    merged = Registry(repositories=tuple(repositories), templates=tuple(templates))
    return merged, len(incoming.repositories), len(incoming.templates)


def import_from(
    current: Registry,
    file: Path,
    mode: str = MODE_MERGE,
    *,
    skip_validation: bool = False,
) -> ImportResult:
    selected = normalise_mode(mode)
    incoming = load_registry_file(file)
    report: ValidationReport | None = None
    if not skip_validation:
        report = validate(incoming)
        report.raise_for_errors()
    if selected == MODE_OVERWRITE:
        return ImportResult(
            registry=incoming,
            mode=selected,
            repositories_merged=len(incoming.repositories),
            templates_merged=len(incoming.templates),
            report=report,
        )
    merged, repo_count, template_count = merge(current, incoming)
    return ImportResult(
        registry=merged,
        mode=selected,
        repositories_merged=repo_count,
        templates_merged=template_count,
        report=report,
    )


def export_to(registry: Registry, file: Path, *, include_cache_info: bool = False) -> ExportResult:
    # include_cache_info is accepted but reserved; the exported schema is unchanged.
    if file.suffix.lower() in YAML_SUFFIXES:
        content = yaml.safe_dump(registry.to_dict(), sort_keys=False, allow_unicode=True)
    else:
        content = dump_registry(registry)
    try:
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StorageError(file, exc) from exc
    return ExportResult(
        path=file,
        repositories=len(registry.repositories),
        templates=len(registry.templates),
        include_cache_info=include_cache_info,
    )


@dataclass
class ConfigService:
    """Binds the import/export engine to the persisted registry."""

    store: RegistryStore

    def import_file(self, file: Path, mode: str = MODE_MERGE, *, skip_validation: bool = False) -> ImportResult:
        result = import_from(self.store.load(), file, mode, skip_validation=skip_validation)
        self.store.save(result.registry)
        return result

    def export_file(self, file: Path, *, include_cache_info: bool = False) -> ExportResult:
        return export_to(self.store.load(), file, include_cache_info=include_cache_info)

    def validate_file(self, file: Path) -> Tuple[Registry, ValidationReport]:
        registry = load_registry_file(file)
        return registry, validate(registry)


__all__ = [
    "ConfigService",
    "ExportResult",
    "IMPORT_MODES",
    "ImportResult",
    "MODE_MERGE",
    "MODE_OVERWRITE",
    "ValidationReport",
    "export_to",
    "import_from",
    "load_registry_file",
    "merge",
    "normalise_mode",
    "validate",
]
