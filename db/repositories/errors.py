"""
Repository-layer exceptions for job and artifact persistence.
"""

from __future__ import annotations


class PersistenceError(Exception):
    """Base exception for job store and artifact store failures."""


class JobPersistenceError(PersistenceError):
    """Raised when a job record cannot be written or read."""


class ArtifactStorageError(PersistenceError):
    """Raised when an output artifact cannot be stored or retrieved."""
