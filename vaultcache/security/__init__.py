"""
vaultcache — Security Module

Value encryption for cached payloads.
"""

from .cipher import ValueCipher, derive_key

__all__ = [
    "ValueCipher",
    "derive_key",
]
