"""Code table resolution."""

from .resolver import CodeTableResolver, CodeTables, resolve_many

__all__ = [
    "CodeTableResolver",
    "CodeTables",
    "resolve_many",
]
