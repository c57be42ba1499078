"""Sparse checkouts backed by the ``git`` executable."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Sequence
from urllib.parse import quote, urlsplit, urlunsplit

from mammoth.domain.errors import CheckoutTimeoutError, ProcessFailedError
from mammoth.domain.registry import Repository
from mammoth.ports.checkout_provider import (
    STEP_CHECKOUT,
    STEP_CLONE,
    STEP_SPARSE,
    CheckoutProvider,
)

STEP_INIT = "init"
DEFAULT_TOKEN_USER = "oauth2"


def authenticated_url(repository: Repository) -> str:
    """Return the clone URL with credentials embedded for http(s) remotes."""
    if not repository.auth_token:
        return repository.url
    parts = urlsplit(repository.url)
    if parts.scheme not in {"http", "https"} or not parts.hostname:
        return repository.url
    user = quote(repository.username or DEFAULT_TOKEN_USER, safe="")
    token = quote(repository.auth_token, safe="")
    host = parts.hostname
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, f"{user}:{token}@{host}", parts.path, parts.query, parts.fragment))


class GitCheckoutProvider(CheckoutProvider):
    def __init__(self, executable: str = "git") -> None:
        self._executable = executable

    def clone(self, repository: Repository, destination: Path, *, timeout: float) -> None:
        self._run(
            STEP_CLONE,
            [
                "clone",
                "--no-checkout",
                "--filter=blob:none",
                "--sparse",
                authenticated_url(repository),
                str(destination),
            ],
            cwd=None,
            timeout=timeout,
            redact=repository.auth_token,
        )

    def restrict_path(self, workdir: Path, path: str, *, timeout: float) -> None:
        self._run(STEP_SPARSE, ["sparse-checkout", "set", path], cwd=workdir, timeout=timeout)

    def checkout_branch(self, workdir: Path, branch: str, *, timeout: float) -> None:
        self._run(STEP_CHECKOUT, ["checkout", branch], cwd=workdir, timeout=timeout)

    def init_repository(self, workdir: Path, *, timeout: float = 60.0) -> None:
        self._run(STEP_INIT, ["init"], cwd=workdir, timeout=timeout)

    def _run(
        self,
        step: str,
        args: Sequence[str],
        *,
        cwd: Path | None,
        timeout: float,
        redact: str | None = None,
    ) -> None:
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        try:
            result = subprocess.run(
                [self._executable, *args],
                cwd=cwd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise CheckoutTimeoutError(step, timeout) from exc
        except FileNotFoundError as exc:
            raise ProcessFailedError(step, None, f"executable '{self._executable}' not found") from exc
        if result.returncode != 0:
            detail = _last_line(result.stderr)
            if redact:
                for secret in (redact, quote(redact, safe="")):
                    detail = detail.replace(secret, "***")
            raise ProcessFailedError(step, result.returncode, detail)


def _last_line(text: str | None) -> str:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return lines[-1] if lines else ""


__all__ = ["GitCheckoutProvider", "authenticated_url"]
