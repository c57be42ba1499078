"""Registry import/export engine."""

from .service import (
    ConfigService,
    ExportResult,
    ImportResult,
    ValidationReport,
    export_to,
    import_from,
    validate,
)

__all__ = [
    "ConfigService",
    "ExportResult",
    "ImportResult",
    "ValidationReport",
    "export_to",
    "import_from",
    "validate",
]
