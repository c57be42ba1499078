"""Error taxonomy shared by the registry, cache and download layers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence


class MammothError(RuntimeError):
    """Base class for every error the CLI reports to the user."""

    code = "MAMMOTH_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class SettingsError(MammothError):
    """Raised when settings.yaml or environment overrides are invalid."""

    code = "SETTINGS_INVALID"


class NotFoundError(MammothError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.capitalize()} '{key}' not found")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"kind": self.kind, "key": self.key}


class AlreadyExistsError(MammothError):
    code = "ALREADY_EXISTS"

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.capitalize()} '{key}' already exists")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"kind": self.kind, "key": self.key}


class InUseError(MammothError):
    code = "IN_USE"

    def __init__(self, repo: str, templates: Sequence[str] = ()) -> None:
        self.repo = repo
        self.templates = list(templates)
        used_by = f" (used by: {', '.join(self.templates)})" if self.templates else ""
        super().__init__(f"Cannot remove repository '{repo}' - it is used by templates{used_by}")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"repo": self.repo, "templates": self.templates}


class ValidationFailedError(MammothError):
    code = "VALIDATION_FAILED"

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Configuration validation failed with {len(self.errors)} error(s)")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"errors": self.errors}


class InvalidModeError(MammothError):
    code = "INVALID_MODE"

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid import mode: {value}. Use 'merge' or 'overwrite'")


class StorageError(MammothError):
    """Filesystem read/write failure."""

    code = "STORAGE_ERROR"

    def __init__(self, path: Path | str, cause: BaseException | str) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O error on {self.path}: {cause}")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"path": str(self.path)}


class RegistryParseError(MammothError):
    code = "PARSE_ERROR"

    def __init__(self, cause: BaseException | str, *, source: Path | None = None) -> None:
        self.cause = cause
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"Failed to parse configuration{where}: {cause}")


class UnsafePathError(MammothError):
    """A registry key or template path would resolve outside its directory."""

    code = "UNSAFE_PATH"

    def __init__(self, kind: str, value: str, reason: str) -> None:
        self.kind = kind
        self.value = value
        self.reason = reason
        super().__init__(f"{kind.capitalize()} '{value}' {reason}")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"kind": self.kind, "value": self.value}


class DownloadError(MammothError):
    """Base class for failures while materialising a template."""

    code = "DOWNLOAD_FAILED"


class ProcessFailedError(DownloadError):
    code = "PROCESS_FAILED"

    def __init__(self, step: str, exit_status: int | None, detail: str = "") -> None:
        self.step = step
        self.exit_status = exit_status
        self.detail = detail
        status = "not started" if exit_status is None else f"exit status {exit_status}"
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Step '{step}' failed ({status}){suffix}")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"step": self.step, "exit_status": self.exit_status}


class CheckoutTimeoutError(DownloadError):
    code = "TIMEOUT"

    def __init__(self, step: str, timeout: float | None = None) -> None:
        self.step = step
        self.timeout = timeout
        after = f" after {timeout:g}s" if timeout is not None else ""
        super().__init__(f"Step '{step}' timed out{after}")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"step": self.step, "timeout": self.timeout}


class PathNotFoundError(DownloadError):
    code = "PATH_NOT_FOUND"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Template path '{path}' not found in repository")

    def to_dict(self) -> dict[str, Any]:
        return super().to_dict() | {"path": self.path}


__all__ = [
    "AlreadyExistsError",
    "CheckoutTimeoutError",
    "DownloadError",
    "InUseError",
    "InvalidModeError",
    "MammothError",
    "NotFoundError",
    "PathNotFoundError",
    "ProcessFailedError",
    "RegistryParseError",
    "SettingsError",
    "StorageError",
    "UnsafePathError",
    "ValidationFailedError",
]
