"""Port definitions for version-control checkouts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from mammoth.domain.registry import Repository

STEP_CLONE = "clone"
STEP_SPARSE = "sparse-checkout"
STEP_CHECKOUT = "checkout"


class CheckoutProvider(ABC):
    """Three-step sparse checkout of a single repository subtree.

    Implementations raise ``CheckoutTimeoutError`` when a step exceeds its
    timeout and ``ProcessFailedError`` when a step exits unsuccessfully.
    """

    @abstractmethod
    def clone(self, repository: Repository, destination: Path, *, timeout: float) -> None:
        """Clone without checking out any files into ``destination``."""

    @abstractmethod
    def restrict_path(self, workdir: Path, path: str, *, timeout: float) -> None:
        """Limit the working copy in ``workdir`` to ``path``."""

    @abstractmethod
    def checkout_branch(self, workdir: Path, branch: str, *, timeout: float) -> None:
        """Populate the working copy from ``branch``."""
