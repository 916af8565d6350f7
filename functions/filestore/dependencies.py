"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from filestore.config import get_settings
from filestore.db import FileStore, InMemoryFileStore, SqlFileStore

_file_store: FileStore | None = None


def get_file_store() -> FileStore:
    """
    Return a singleton store so every request shares one storage handle.
    """
    global _file_store
    if _file_store:
        return _file_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _file_store = InMemoryFileStore(
            timeout_seconds=settings.storage_timeout_seconds
        )
    else:
        _file_store = SqlFileStore(
            settings.resolved_database_url(),
            timeout_seconds=settings.storage_timeout_seconds,
        )
    return _file_store


def reset_file_store() -> None:
    """Close and forget the singleton store."""
    global _file_store
    if _file_store:
        _file_store.close()
    _file_store = None
