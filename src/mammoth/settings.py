"""Runtime settings for mammoth-cli."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from mammoth import __version__
from mammoth.domain.errors import SettingsError

APP_DIRNAME = "mammoth-cli"
REGISTRY_FILENAME = "templates.json"
SETTINGS_FILENAME = "settings.yaml"

_ENV_OVERRIDES = {
    "MAMMOTH_CLONE_TIMEOUT": "clone_timeout",
    "MAMMOTH_SPARSE_TIMEOUT": "sparse_timeout",
    "MAMMOTH_CHECKOUT_TIMEOUT": "checkout_timeout",
    "MAMMOTH_GIT": "git_executable",
}


@dataclass(frozen=True)
class DownloadSettings:
    clone_timeout: float = 300.0
    sparse_timeout: float = 60.0
    checkout_timeout: float = 120.0
    removal_attempts: int = 3
    removal_backoff: float = 0.5
    git_executable: str = "git"

    def merged(self, overrides: Mapping[str, Any]) -> "DownloadSettings":
        known = {item.name for item in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise SettingsError(f"unknown download setting '{key}'")
            current = getattr(self, key)
            try:
                changes[key] = type(current)(value)
            except (TypeError, ValueError) as exc:
                raise SettingsError(f"invalid value for download.{key}: {value!r}") from exc
        result = replace(self, **changes)
        result.check()
        return result

    def check(self) -> None:
        for name in ("clone_timeout", "sparse_timeout", "checkout_timeout"):
            if getattr(self, name) <= 0:
                raise SettingsError(f"download.{name} must be positive")
        if self.removal_attempts < 1:
            raise SettingsError("download.removal_attempts must be at least 1")
        if self.removal_backoff < 0:
            raise SettingsError("download.removal_backoff must not be negative")
        if not self.git_executable.strip():
            raise SettingsError("download.git_executable must be a non-empty string")


@dataclass(frozen=True)
class RuntimeSettings:
    config_dir: Path
    cache_dir: Path
    log_dir: Path
    download: DownloadSettings = field(default_factory=DownloadSettings)
    cli_version: str = __version__

    @property
    def registry_file(self) -> Path:
        return self.config_dir / REGISTRY_FILENAME

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILENAME


def _home_or_none() -> Path | None:
    try:
        return Path.home()
    except RuntimeError:
        return None


def _platform_dirs() -> tuple[Path, Path, Path]:
    """Return (config, cache, log) base directories for the current platform."""
    home = _home_or_none()
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        local = os.environ.get("LOCALAPPDATA")
        config = Path(appdata) if appdata else (home / "AppData" / "Roaming" if home else None)
        cache = Path(local) if local else (home / "AppData" / "Local" if home else None)
        logs = cache
    elif sys.platform == "darwin":
        config = home / "Library" / "Application Support" if home else None
        cache = home / "Library" / "Caches" if home else None
        logs = home / "Library" / "Logs" if home else None
    else:
        config = _xdg("XDG_CONFIG_HOME", home, ".config")
        cache = _xdg("XDG_CACHE_HOME", home, ".cache")
        logs = _xdg("XDG_STATE_HOME", home, ".local/state")
    return (
        config if config is not None else Path(".config"),
        cache if cache is not None else Path(".cache"),
        logs if logs is not None else Path(".cache"),
    )


def _xdg(var: str, home: Path | None, default: str) -> Path | None:
    value = os.environ.get(var, "").strip()
    if value:
        return Path(value)
    return home / default if home else None


def _read_settings_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"invalid settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"settings file {path} must contain a mapping")
    download = data.get("download") or {}
    if not isinstance(download, dict):
        raise SettingsError(f"'download' section in {path} must be a mapping")
    return download


def _env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for var, key in _ENV_OVERRIDES.items():
        value = environ.get(var, "").strip()
        if value:
            overrides[key] = value
    return overrides


def load_settings(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    env = os.environ if environ is None else environ
    home_override = env.get("MAMMOTH_HOME", "").strip()
    if home_override:
        base = Path(home_override).expanduser()
        config_dir = base / "config"
        cache_dir = base / "cache" / "templates"
        log_dir = base / "logs"
    else:
        config_base, cache_base, log_base = _platform_dirs()
        config_dir = config_base / APP_DIRNAME
        cache_dir = cache_base / APP_DIRNAME / "templates"
        log_dir = log_base / APP_DIRNAME / "logs"

    download = DownloadSettings()
    file_overrides = _read_settings_file(config_dir / SETTINGS_FILENAME)
    if file_overrides:
        download = download.merged(file_overrides)
    env_overrides = _env_overrides(env)
    if env_overrides:
        download = download.merged(env_overrides)

    return RuntimeSettings(
        config_dir=config_dir,
        cache_dir=cache_dir,
        log_dir=log_dir,
        download=download,
    )


SETTINGS = load_settings()
