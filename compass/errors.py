"""
Exceptions raised inside Compass.

The engine converts these into logged warnings and result values; they only
escape from the lower layers (repository, storage, snapshot codecs).
"""

from __future__ import annotations


class CompassError(Exception):
    """Base exception for all Compass errors."""

    pass


class NotFoundError(CompassError):
    """A repository, commit or branch does not exist."""

    pass


class SerializationError(CompassError):
    """A payload could not be encoded or decoded."""

    pass


class StorageError(CompassError):
    """Reading or writing persisted data failed."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class PushFailedError(CompassError):
    """The canonical store rejected a push or did not know the entity."""

    def __init__(self, message: str, entity_id: str):
        super().__init__(message)
        self.entity_id = entity_id
