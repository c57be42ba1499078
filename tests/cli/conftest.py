from __future__ import annotations

import pytest

from mammoth.cli import main as cli_main
from mammoth.settings import RuntimeSettings

REPO_URL = "https://example.com/templates.git"


@pytest.fixture()
def runtime_settings(settings: RuntimeSettings, fake_provider, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    """Isolated settings plus an in-memory checkout provider for CLI scenarios."""
    monkeypatch.setattr(cli_main, "SETTINGS", settings, raising=False)
    monkeypatch.setattr(cli_main, "_build_provider", lambda: fake_provider)
    monkeypatch.setattr(cli_main, "_git_init", lambda path: (path / ".git").mkdir())
    return settings


@pytest.fixture()
def seeded(runtime_settings: RuntimeSettings) -> RuntimeSettings:
    """Registry with one repository and two templates, one of them unreachable."""
    assert cli_main.main(["repo", "add", "official", "--url", REPO_URL]) == 0
    assert (
        cli_main.main(
            [
                "template",
                "add",
                "vue3",
                "--name",
                "Vue 3",
                "--repo",
                "official",
                "--path",
                "vue/basic",
                "--description",
                "Vue starter",
                "--tags",
                "vue, ts",
            ]
        )
        == 0
    )
    assert (
        cli_main.main(
            [
                "template",
                "add",
                "broken",
                "--name",
                "Broken",
                "--repo",
                "official",
                "--path",
                "missing/dir",
                "--description",
                "Nope",
            ]
        )
        == 0
    )
    return runtime_settings

