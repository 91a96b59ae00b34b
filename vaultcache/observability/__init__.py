"""
vaultcache — Observability Module

Structured JSON logging for the package logger tree.

Usage:
    from vaultcache.observability import setup_logging

    setup_logging("DEBUG")
"""

from .logging import JSONFormatter, setup_logging

__all__ = [
    "JSONFormatter",
    "setup_logging",
]
