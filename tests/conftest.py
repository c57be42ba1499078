from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "mammoth-home"
os.environ.setdefault("MAMMOTH_HOME", str(SANDBOX_HOME))
os.environ.setdefault("MAMMOTH_TELEMETRY", "1")
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
PYTEST_TEMP = Path(os.environ.get("PYTEST_DEBUG_TEMPROOT", "/tmp/mammoth-pytest")).resolve()
os.environ.setdefault("PYTEST_DEBUG_TEMPROOT", str(PYTEST_TEMP))
PYTEST_TEMP.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mammoth.domain.registry import Repository  # noqa: E402
from mammoth.ports.checkout_provider import (  # noqa: E402
    STEP_CHECKOUT,
    STEP_CLONE,
    STEP_SPARSE,
    CheckoutProvider,
)
from mammoth.settings import DownloadSettings, RuntimeSettings  # noqa: E402


@dataclass
class FakeCheckoutProvider(CheckoutProvider):
    """In-memory stand-in for git: ``files`` maps repository URL to {relative path: content}."""

    files: Dict[str, Dict[str, str]] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)
    calls: List[tuple] = field(default_factory=list)
    _restricted: Dict[str, str] = field(default_factory=dict)
    _cloned: Dict[str, str] = field(default_factory=dict)

    def _maybe_fail(self, step: str) -> None:
        error = self.failures.get(step)
        if error is not None:
            raise error

    def clone(self, repository: Repository, destination: Path, *, timeout: float) -> None:
        self.calls.append((STEP_CLONE, repository.name, timeout))
        destination.mkdir(parents=True, exist_ok=True)
        (destination / ".git").mkdir(exist_ok=True)
        self._cloned[str(destination)] = repository.url
        self._maybe_fail(STEP_CLONE)

    def restrict_path(self, workdir: Path, path: str, *, timeout: float) -> None:
        self.calls.append((STEP_SPARSE, path, timeout))
        self._maybe_fail(STEP_SPARSE)
        self._restricted[str(workdir)] = path

    def checkout_branch(self, workdir: Path, branch: str, *, timeout: float) -> None:
        self.calls.append((STEP_CHECKOUT, branch, timeout))
        self._maybe_fail(STEP_CHECKOUT)
        url = self._cloned[str(workdir)]
        prefix = self._restricted.get(str(workdir), "").strip("/")
        for relative, content in self.files.get(url, {}).items():
            if prefix and not relative.startswith(prefix + "/"):
                continue
            target = workdir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    def steps(self) -> List[str]:
        return [call[0] for call in self.calls]


def make_runtime_settings(base: Path, *, download: Optional[DownloadSettings] = None) -> RuntimeSettings:
    config_dir = base / "config"
    cache_dir = base / "cache" / "templates"
    log_dir = base / "logs"
    for directory in (config_dir, cache_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return RuntimeSettings(
        config_dir=config_dir,
        cache_dir=cache_dir,
        log_dir=log_dir,
        download=download or DownloadSettings(removal_backoff=0.0),
        cli_version="0.3.0",
    )


@pytest.fixture()
def settings(tmp_path: Path) -> RuntimeSettings:
    return make_runtime_settings(tmp_path / "runtime")


@pytest.fixture()
def fake_provider() -> FakeCheckoutProvider:
    return FakeCheckoutProvider(
        files={
            "https://example.com/templates.git": {
                "vue/basic/package.json": '{"name": "template", "version": "0.0.1"}\n',
                "vue/basic/src/main.ts": "console.log('hi')\n",
                "react/app/index.js": "export {}\n",
            }
        }
    )
