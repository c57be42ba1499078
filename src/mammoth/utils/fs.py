"""Filesystem helpers for cache maintenance."""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Callable


def remove_tree(
    path: Path,
    *,
    attempts: int = 3,
    backoff: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Remove ``path`` recursively, retrying on ``OSError``.

    Transient locks held by antivirus scanners or file indexers make the first
    removal fail on some platforms, so the removal is retried ``attempts`` times
    with ``backoff`` seconds between tries. Returns the attempt number that
    succeeded (0 when there was nothing to remove); re-raises the last error.
    """
    if not path.exists() and not path.is_symlink():
        return 0
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
            return attempt
        except FileNotFoundError:
            return attempt
        except OSError:
            if attempt == attempts:
                raise
            sleep(backoff)
    return attempts


def copy_tree(source: Path, destination: Path) -> None:
    """Copy ``source`` into ``destination``, merging into an existing directory."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, destination, dirs_exist_ok=True)


def directory_size(root: Path) -> int:
    total = 0
    for candidate in root.rglob("*"):
        if candidate.is_file():
            total += candidate.stat().st_size
    return total


__all__ = ["copy_tree", "directory_size", "remove_tree"]
