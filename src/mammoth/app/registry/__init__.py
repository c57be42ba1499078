"""Registry mutation services."""

from .service import (
    RegistryService,
    add_repository,
    add_template,
    remove_repository,
    remove_template,
)

__all__ = [
    "RegistryService",
    "add_repository",
    "add_template",
    "remove_repository",
    "remove_template",
]
