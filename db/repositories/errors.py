"""
Repository-layer exceptions for inspection store lookups.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for inspection store failures."""


class EstablishmentNotFoundError(RepositoryError, LookupError):
    """Raised when no establishment matches an id or license number."""
