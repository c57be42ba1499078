"""Template download orchestration."""

from .service import (
    BatchDownloadReport,
    DownloadOrchestrator,
    DownloadOutcome,
    DownloadResult,
)

__all__ = ["BatchDownloadReport", "DownloadOrchestrator", "DownloadOutcome", "DownloadResult"]
