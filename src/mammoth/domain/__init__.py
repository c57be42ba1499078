"""Domain primitives for the template registry and cache."""

from .cache import CacheResolver
from .registry import Registry, Repository, Template, parse_tags

__all__ = ["CacheResolver", "Registry", "Repository", "Template", "parse_tags"]
