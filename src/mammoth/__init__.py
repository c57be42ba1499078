"""mammoth-cli: frontend project scaffolding from git-hosted templates."""

__version__ = "0.3.0"

__all__ = ["__version__"]
