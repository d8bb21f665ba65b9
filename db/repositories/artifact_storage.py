"""
Storage backend abstractions for summary output artifacts.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Protocol

from app.domain.sales_summary import ArtifactReference
from db.repositories.errors import ArtifactStorageError


class ArtifactStore(Protocol):
    """
    Store/retrieve capability used by the summary job service.

    Backends that can issue a direct download link return it in
    ``ArtifactReference.url``; others leave it unset and are served through
    ``retrieve``.
    """

    def store(self, content: bytes, destination_path: str) -> ArtifactReference:
        ...

    def retrieve(self, storage_path: str) -> bytes:
        ...


def _safe_relative_path(storage_path: str) -> PurePosixPath:
    relative = PurePosixPath(storage_path.strip().lstrip("/"))
    if not relative.parts or ".." in relative.parts:
        raise ArtifactStorageError(f"Invalid artifact path: {storage_path!r}")
    return relative


class LocalArtifactStore:
    """
    Local filesystem artifact backend.
    """

    def __init__(self, root_dir: str | Path = "data/results") -> None:
        self._root_dir = Path(root_dir)

    def store(self, content: bytes, destination_path: str) -> ArtifactReference:
        relative_path = _safe_relative_path(destination_path)
        absolute_path = self._root_dir / relative_path
        tmp_path = absolute_path.with_suffix(f"{absolute_path.suffix}.tmp")

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(absolute_path)
        except OSError as exc:
            raise ArtifactStorageError("Failed to write summary artifact to storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return ArtifactReference(storage_path=relative_path.as_posix())

    def retrieve(self, storage_path: str) -> bytes:
        target = self._root_dir / _safe_relative_path(storage_path)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise ArtifactStorageError(f"Summary artifact not available: {storage_path}") from exc
