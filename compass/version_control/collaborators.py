"""
Interfaces to the parts of the host application Compass talks to.

The engine consumes an author provider, a canonical store and an optional
broadcaster, and writes the working document. Simple implementations are
provided for hosts and tests.
"""

from typing import Any, Dict, List, Optional, Protocol, Tuple, Type

from compass.errors import SerializationError, StorageError
from compass.logging import get_compass_logger
from .snapshot import S
from .storage import KeyValueStorage

logger = get_compass_logger("engine")


class AuthorProvider(Protocol):
    """Supplies the name recorded as a commit's author."""

    def current_user(self) -> Optional[str]:
        ...


class CanonicalStore(Protocol):
    """The authoritative document store the rest of the application reads."""

    def push(self, entity_id: str, snapshot: Any) -> bool:
        ...

    def get(self, entity_id: str) -> Optional[Any]:
        ...


class Broadcaster(Protocol):
    """Sends a saved snapshot to remote peers."""

    def broadcast(self, entity_id: str, snapshot: Any) -> None:
        ...


class StaticAuthorProvider:
    """Author provider returning a fixed name, e.g. the logged-in user."""

    def __init__(self, username: Optional[str] = None):
        self.username = username

    def current_user(self) -> Optional[str]:
        return self.username


class InMemoryCanonicalStore:
    """
    Canonical store backed by a dict of registered entities.

    Pushing an entity that was never registered fails, the same way a
    campaign refuses to update a scene it does not contain.
    """

    def __init__(self) -> None:
        self.documents: Dict[str, Any] = {}
        self.push_count = 0

    def register(self, entity_id: str, snapshot: Any) -> None:
        """Add an entity to the store."""
        self.documents[entity_id] = snapshot

    def push(self, entity_id: str, snapshot: Any) -> bool:
        if entity_id not in self.documents:
            return False
        self.documents[entity_id] = snapshot
        self.push_count += 1
        return True

    def get(self, entity_id: str) -> Optional[Any]:
        return self.documents.get(entity_id)


class RecordingBroadcaster:
    """Broadcaster that keeps every message it was asked to send."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, Any]] = []

    def broadcast(self, entity_id: str, snapshot: Any) -> None:
        self.sent.append((entity_id, snapshot))


class WorkingDocument:
    """
    The single well-known file holding the most recently saved snapshot.

    It is one location per session, not per entity, and is overwritten on
    every save.
    """

    def __init__(self, storage: KeyValueStorage, key: str = "CurrentScene.json"):
        self.storage = storage
        self.key = key

    def save(self, snapshot: Any) -> bool:
        """
        Overwrite the working document.

        Returns:
            True if written, False if the write failed (logged)
        """
        try:
            self.storage.write(self.key, snapshot.encode())
        except (StorageError, SerializationError) as e:
            logger.error(f"Failed to save working document {self.key}: {e}")
            return False
        logger.debug(f"Working document saved to {self.key}")
        return True

    def load(self, snapshot_type: Type[S]) -> Optional[S]:
        """Read the working document back, None if missing or unreadable."""
        try:
            data = self.storage.read(self.key)
            if data is None:
                return None
            return snapshot_type.decode(data)
        except (StorageError, SerializationError) as e:
            logger.warning(f"Could not load working document {self.key}: {e}")
            return None
