from .service import CleanupReport, CleanupService

__all__ = ["CleanupReport", "CleanupService"]
