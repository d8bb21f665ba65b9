"""
Repository layer exports.
"""

from db.repositories.artifact_storage import ArtifactStore, LocalArtifactStore
from db.repositories.errors import ArtifactStorageError, JobPersistenceError, PersistenceError
from db.repositories.summary_job_repository import SummaryJobRepository

__all__ = [
    "ArtifactStore",
    "LocalArtifactStore",
    "ArtifactStorageError",
    "JobPersistenceError",
    "PersistenceError",
    "SummaryJobRepository",
]
