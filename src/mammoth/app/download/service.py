"""Materialise template subtrees into the local cache."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List

from mammoth.domain.cache import CacheResolver
from mammoth.domain.errors import (
    DownloadError,
    MammothError,
    NotFoundError,
    PathNotFoundError,
    StorageError,
    UnsafePathError,
)
from mammoth.domain.registry import Registry, Repository, Template, template_path_problem
from mammoth.ports.checkout_provider import CheckoutProvider
from mammoth.settings import DownloadSettings, RuntimeSettings
from mammoth.utils.fs import copy_tree, remove_tree
from mammoth.utils.telemetry import record_structured_event

STATUS_DOWNLOADED = "downloaded"
STATUS_CACHED = "cached"
STATUS_FAILED = "failed"

Reporter = Callable[[str], None]


def _print(message: str) -> None:
    print(message)


@dataclass(frozen=True)
class DownloadResult:
    template_id: str
    status: str
    cache_path: Path
    duration_ms: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.status == STATUS_CACHED


@dataclass(frozen=True)
class DownloadOutcome:
    template_id: str
    status: str
    cache_path: Path | None = None
    error: MammothError | None = None

    def to_dict(self) -> dict:
        payload: dict = {"id": self.template_id, "status": self.status}
        if self.cache_path is not None:
            payload["path"] = str(self.cache_path)
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        return payload


@dataclass
class BatchDownloadReport:
    outcomes: List[DownloadOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[DownloadOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == STATUS_FAILED]

    @property
    def completed(self) -> bool:
        return not self.failures

    def summary(self) -> dict[str, int]:
        counts = {STATUS_DOWNLOADED: 0, STATUS_CACHED: 0, STATUS_FAILED: 0}
        for outcome in self.outcomes:
            counts[outcome.status] = counts.get(outcome.status, 0) + 1
        return {"total": len(self.outcomes), **counts}


class DownloadOrchestrator:
    """Sparse-checks-out one template at a time into ``<cache>/<repo>/<id>``.

    Each download runs clone, sparse-set and branch checkout in a scratch
    directory derived from the repository name, copies the requested subtree
    into the cache and always removes the scratch directory afterwards.
    """

    def __init__(
        self,
        registry: Registry,
        resolver: CacheResolver,
        provider: CheckoutProvider,
        settings: RuntimeSettings,
        *,
        reporter: Reporter = _print,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._provider = provider
        self._settings = settings
        self._reporter = reporter
        self._sleep = sleep

    @property
    def limits(self) -> DownloadSettings:
        return self._settings.download

    def download(self, template: Template, *, force: bool = False) -> DownloadResult:
        repository = self._registry.repository(template.repo)
        if repository is None:
            raise NotFoundError("repository", template.repo)

        problem = template_path_problem(template.path)
        if problem is not None:
            raise UnsafePathError("template path", template.path, problem)
        cache_path = self._resolver.cache_path(template)
        temp_dir = self._resolver.temp_path(repository)
        if self._resolver.is_cached(template) and not force:
            self._reporter(f"Template '{template.id}' already cached")
            return DownloadResult(template.id, STATUS_CACHED, cache_path)

        self._reporter(f"Downloading template '{template.id}' from {repository.name}...")
        started = time.perf_counter()
        event_payload = {"template": template.id, "repo": repository.name, "force": force}
        self._record(status="start", payload=event_payload)

        try:
            self._remove(temp_dir)
            temp_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(temp_dir, exc) from exc

        failure: BaseException | None = None
        try:
            self._checkout(template, repository, temp_dir, cache_path)
        except BaseException as exc:
            failure = exc
            raise
        finally:
            duration = (time.perf_counter() - started) * 1000
            try:
                self._cleanup(temp_dir, template, failure)
            except StorageError as exc:
                failure = exc
                raise
            finally:
                if failure is not None:
                    self._record_failure(failure, event_payload, duration)

        self._record(status="success", duration_ms=duration, payload=event_payload)
        self._reporter(f"Template '{template.id}' downloaded to: {cache_path}")
        return DownloadResult(template.id, STATUS_DOWNLOADED, cache_path, duration)

    def download_all(self, *, force: bool = False) -> BatchDownloadReport:
        report = BatchDownloadReport()
        for template in self._registry.templates:
            try:
                result = self.download(template, force=force)
            except MammothError as exc:
                self._reporter(f"Failed to download template '{template.id}': {exc}")
                report.outcomes.append(DownloadOutcome(template.id, STATUS_FAILED, error=exc))
                continue
            report.outcomes.append(DownloadOutcome(template.id, result.status, result.cache_path))
        return report

    def _checkout(self, template: Template, repository: Repository, workdir: Path, cache_path: Path) -> None:
        limits = self.limits
        self._reporter("  cloning repository...")
        self._provider.clone(repository, workdir, timeout=limits.clone_timeout)
        self._reporter("  configuring sparse checkout...")
        self._provider.restrict_path(workdir, template.path, timeout=limits.sparse_timeout)
        self._reporter(f"  checking out {repository.branch}...")
        self._provider.checkout_branch(workdir, repository.branch, timeout=limits.checkout_timeout)

        source = workdir / template.path
        if not source.is_dir():
            raise PathNotFoundError(template.path)
        if not source.resolve().is_relative_to(workdir.resolve()):
            raise UnsafePathError("template path", template.path, "resolves outside the checkout")

        self._reporter("  copying template files...")
        try:
            self._remove(cache_path)
        except OSError as exc:
            raise StorageError(cache_path, f"failed to remove old cache after {limits.removal_attempts} attempts: {exc}") from exc
        try:
            copy_tree(source, cache_path)
        except OSError as exc:
            raise StorageError(cache_path, exc) from exc

    def _cleanup(self, temp_dir: Path, template: Template, failure: BaseException | None) -> None:
        try:
            self._remove(temp_dir)
        except OSError as exc:
            if failure is None:
                raise StorageError(temp_dir, exc) from exc
            print(f"warning: failed to remove temp dir {temp_dir}: {exc}", file=sys.stderr)
            self._record(
                "template.cleanup",
                status="error",
                level="warn",
                payload={"template": template.id, "path": str(temp_dir), "error": str(exc)},
            )

    def _record(self, event: str = "template.download", **fields: Any) -> None:
        try:
            record_structured_event(self._settings, event, component="download", **fields)
        except OSError as exc:
            print(f"warning: telemetry not written to {self._settings.log_dir}: {exc}", file=sys.stderr)

    def _record_failure(self, failure: BaseException, payload: dict, duration: float) -> None:
        error = failure.to_dict() if isinstance(failure, MammothError) else {"message": repr(failure)}
        self._record(status="error", level="error", duration_ms=duration, payload=payload | {"error": error})

    def _remove(self, path: Path) -> None:
        limits = self.limits
        self._resolver.ensure_inside(path)
        remove_tree(path, attempts=limits.removal_attempts, backoff=limits.removal_backoff, sleep=self._sleep)


__all__ = [
    "BatchDownloadReport",
    "DownloadError",
    "DownloadOrchestrator",
    "DownloadOutcome",
    "DownloadResult",
    "STATUS_CACHED",
    "STATUS_DOWNLOADED",
    "STATUS_FAILED",
]
