from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from mammoth.app.download import DownloadOrchestrator
from mammoth.app.download.service import STATUS_CACHED, STATUS_DOWNLOADED, STATUS_FAILED
from mammoth.domain.cache import TEMP_DIRNAME, CacheResolver
from mammoth.app.download import service as download_service
from mammoth.domain.errors import (
    CheckoutTimeoutError,
    NotFoundError,
    PathNotFoundError,
    ProcessFailedError,
    StorageError,
    UnsafePathError,
)
from mammoth.domain.registry import Registry, Repository, Template
from mammoth.settings import RuntimeSettings
from mammoth.utils.fs import remove_tree
from mammoth.utils.telemetry import iter_events

REPO_URL = "https://example.com/templates.git"


def _registry() -> Registry:
    return Registry(
        repositories=[Repository("official", REPO_URL)],
        templates=[
            Template("vue3", "Vue 3", "official", "vue/basic", "Vue starter", "vue"),
            Template("react", "React", "official", "react/app", "React starter", "react"),
            Template("broken", "Broken", "official", "missing/dir", "Nope", "vue"),
        ],
    )


def _orchestrator(settings: RuntimeSettings, provider, messages: list[str] | None = None) -> DownloadOrchestrator:
    sink = messages if messages is not None else []
    return DownloadOrchestrator(
        _registry(),
        CacheResolver(settings.cache_dir),
        provider,
        settings,
        reporter=sink.append,
        sleep=lambda _: None,
    )


def test_download_populates_cache_and_removes_temp(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    template = _registry().template("vue3")

    result = orchestrator.download(template)

    assert result.status == STATUS_DOWNLOADED
    assert result.cache_path == settings.cache_dir / "official" / "vue3"
    assert (result.cache_path / "package.json").is_file()
    assert (result.cache_path / "src" / "main.ts").is_file()
    assert not (result.cache_path / ".git").exists()
    assert not (settings.cache_dir / TEMP_DIRNAME / "official").exists()
    assert fake_provider.steps() == ["clone", "sparse-checkout", "checkout"]


def test_download_passes_configured_timeouts(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    orchestrator.download(_registry().template("vue3"))
    timeouts = [call[2] for call in fake_provider.calls]
    assert timeouts == [300.0, 60.0, 120.0]


def test_second_download_is_cached_noop(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    template = _registry().template("vue3")
    orchestrator.download(template)
    calls_after_first = len(fake_provider.calls)

    result = orchestrator.download(template)

    assert result.status == STATUS_CACHED
    assert result.skipped
    assert len(fake_provider.calls) == calls_after_first


def test_force_replaces_existing_entry(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    template = _registry().template("vue3")
    stale_dir = settings.cache_dir / "official" / "vue3"
    stale_dir.mkdir(parents=True)
    (stale_dir / "stale.txt").write_text("old", encoding="utf-8")

    result = orchestrator.download(template, force=True)

    assert result.status == STATUS_DOWNLOADED
    assert not (stale_dir / "stale.txt").exists()
    assert (stale_dir / "package.json").is_file()


def test_timeout_leaves_no_temp_and_no_cache(settings: RuntimeSettings, fake_provider) -> None:
    fake_provider.failures["sparse-checkout"] = CheckoutTimeoutError("sparse-checkout", 60)
    orchestrator = _orchestrator(settings, fake_provider)
    template = _registry().template("vue3")

    with pytest.raises(CheckoutTimeoutError):
        orchestrator.download(template)

    assert not (settings.cache_dir / TEMP_DIRNAME / "official").exists()
    assert not (settings.cache_dir / "official" / "vue3").exists()
    assert fake_provider.steps() == ["clone", "sparse-checkout"]


def test_clone_failure_short_circuits(settings: RuntimeSettings, fake_provider) -> None:
    fake_provider.failures["clone"] = ProcessFailedError("clone", 128, "repository not found")
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(ProcessFailedError):
        orchestrator.download(_registry().template("vue3"))
    assert fake_provider.steps() == ["clone"]
    assert not (settings.cache_dir / TEMP_DIRNAME / "official").exists()


def test_interrupt_still_cleans_temp(settings: RuntimeSettings, fake_provider) -> None:
    fake_provider.failures["checkout"] = KeyboardInterrupt()
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(KeyboardInterrupt):
        orchestrator.download(_registry().template("vue3"))
    assert not (settings.cache_dir / TEMP_DIRNAME / "official").exists()


def test_missing_path_raises_and_keeps_cache_clean(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(PathNotFoundError) as excinfo:
        orchestrator.download(_registry().template("broken"))
    assert excinfo.value.path == "missing/dir"
    assert not (settings.cache_dir / "official" / "broken").exists()


def test_unknown_repository(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(NotFoundError):
        orchestrator.download(Template("x", "X", "ghost", "p"))
    assert fake_provider.calls == []


def test_download_all_isolates_failures(settings: RuntimeSettings, fake_provider) -> None:
    messages: list[str] = []
    orchestrator = _orchestrator(settings, fake_provider, messages)

    report = orchestrator.download_all()

    assert [outcome.template_id for outcome in report.outcomes] == ["vue3", "react", "broken"]
    assert [outcome.status for outcome in report.outcomes] == [STATUS_DOWNLOADED, STATUS_DOWNLOADED, STATUS_FAILED]
    assert not report.completed
    assert [outcome.template_id for outcome in report.failures] == ["broken"]
    assert isinstance(report.failures[0].error, PathNotFoundError)
    assert report.summary() == {"total": 3, "downloaded": 2, "cached": 0, "failed": 1}
    assert any("Failed to download template 'broken'" in message for message in messages)


def test_download_all_reuses_cache(settings: RuntimeSettings, fake_provider) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    orchestrator.download(_registry().template("vue3"))
    report = orchestrator.download_all()
    assert report.outcomes[0].status == STATUS_CACHED


def test_download_records_telemetry(settings: RuntimeSettings, fake_provider) -> None:
    fake_provider.failures["checkout"] = ProcessFailedError("checkout", 1, "no such branch")
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(ProcessFailedError):
        orchestrator.download(_registry().template("vue3"))
    events = [evt for evt in iter_events(settings) if evt["event"] == "template.download"]
    assert [evt.get("status") for evt in events] == ["start", "error"]
    assert events[-1]["payload"]["error"]["code"] == "PROCESS_FAILED"
    assert events[-1]["level"] == "error"


def test_removal_settings_are_honoured(settings: RuntimeSettings, fake_provider) -> None:
    tuned = replace(settings, download=replace(settings.download, removal_attempts=1))
    orchestrator = _orchestrator(tuned, fake_provider)
    assert orchestrator.limits.removal_attempts == 1
    assert orchestrator.download(_registry().template("react")).status == STATUS_DOWNLOADED


def test_parent_directory_repository_cannot_touch_other_cache_entries(settings: RuntimeSettings, fake_provider) -> None:
    registry = Registry(
        repositories=[Repository("official", REPO_URL), Repository("..", REPO_URL)],
        templates=[
            Template("vue3", "Vue 3", "official", "vue/basic", "Vue starter", "vue"),
            Template("evil", "Evil", "..", "vue/basic", "Escapes the cache", "vue"),
        ],
    )
    orchestrator = DownloadOrchestrator(
        registry, CacheResolver(settings.cache_dir), fake_provider, settings, reporter=lambda _: None
    )
    orchestrator.download(registry.template("vue3"))
    calls_before = list(fake_provider.calls)

    with pytest.raises(UnsafePathError):
        orchestrator.download(registry.template("evil"))

    assert (settings.cache_dir / "official" / "vue3" / "package.json").is_file()
    assert fake_provider.calls == calls_before


@pytest.mark.parametrize("path", ["../..", "vue/../../..", "/etc"])
def test_unsafe_template_path_is_rejected_before_checkout(settings: RuntimeSettings, fake_provider, path: str) -> None:
    orchestrator = _orchestrator(settings, fake_provider)
    with pytest.raises(UnsafePathError) as excinfo:
        orchestrator.download(Template("up", "Up", "official", path))
    assert excinfo.value.kind == "template path"
    assert fake_provider.calls == []
    assert not (settings.cache_dir / "official" / "up").exists()


def _fail_scratch_removal(monkeypatch: pytest.MonkeyPatch, settings: RuntimeSettings) -> Path:
    scratch = settings.cache_dir / TEMP_DIRNAME / "official"

    def flaky_remove_tree(path: Path, **kwargs) -> None:
        if path == scratch and path.exists():
            raise OSError("directory busy")
        remove_tree(path, **kwargs)

    monkeypatch.setattr(download_service, "remove_tree", flaky_remove_tree)
    return scratch


def test_scratch_cleanup_failure_after_success_raises_storage_error(
    settings: RuntimeSettings, fake_provider, monkeypatch: pytest.MonkeyPatch
) -> None:
    scratch = _fail_scratch_removal(monkeypatch, settings)
    orchestrator = _orchestrator(settings, fake_provider)

    with pytest.raises(StorageError) as excinfo:
        orchestrator.download(_registry().template("vue3"))

    assert excinfo.value.path == scratch
    events = [evt for evt in iter_events(settings) if evt["event"] == "template.download"]
    assert [evt.get("status") for evt in events] == ["start", "error"]
    assert events[-1]["payload"]["error"]["code"] == "STORAGE_ERROR"


def test_scratch_cleanup_failure_keeps_original_step_error(
    settings: RuntimeSettings, fake_provider, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    scratch = _fail_scratch_removal(monkeypatch, settings)
    fake_provider.failures["checkout"] = ProcessFailedError("checkout", 1, "no such branch")
    orchestrator = _orchestrator(settings, fake_provider)

    with pytest.raises(ProcessFailedError):
        orchestrator.download(_registry().template("vue3"))

    assert f"warning: failed to remove temp dir {scratch}" in capsys.readouterr().err
    cleanup = [evt for evt in iter_events(settings) if evt["event"] == "template.cleanup"]
    assert len(cleanup) == 1
    assert cleanup[0]["level"] == "warn"
    assert cleanup[0]["payload"]["path"] == str(scratch)
    failed = [evt for evt in iter_events(settings) if evt["event"] == "template.download" and evt.get("status") == "error"]
    assert failed[-1]["payload"]["error"]["code"] == "PROCESS_FAILED"


def test_unwritable_event_log_does_not_abort_batch(
    settings: RuntimeSettings, fake_provider, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def broken_log(*args, **kwargs) -> None:
        raise OSError("read-only file system")

    monkeypatch.setattr(download_service, "record_structured_event", broken_log)
    orchestrator = _orchestrator(settings, fake_provider)

    report = orchestrator.download_all()

    assert [outcome.status for outcome in report.outcomes] == [STATUS_DOWNLOADED, STATUS_DOWNLOADED, STATUS_FAILED]
    assert isinstance(report.failures[0].error, PathNotFoundError)
    assert "telemetry not written" in capsys.readouterr().err
