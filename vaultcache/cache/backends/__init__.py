"""
vaultcache — Storage Backends

Exports available storage backend implementations.

Redis backend is lazy-loaded via factory.py to avoid import overhead.
"""

from .filesystem import FilesystemCacheBackend

__all__ = [
    "FilesystemCacheBackend",
]
