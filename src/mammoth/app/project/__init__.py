"""Project generation."""

from .service import GenerationResult, ProjectGenerator, ProjectSpec, update_package_json

__all__ = ["GenerationResult", "ProjectGenerator", "ProjectSpec", "update_package_json"]
