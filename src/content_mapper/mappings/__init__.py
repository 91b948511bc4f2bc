"""Strategy table and value coercion helpers."""

from . import common, registry

__all__ = [
    "common",
    "registry",
]
