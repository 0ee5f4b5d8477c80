"""
Storage backends and the repository store.

Repositories are kept as one JSON document per (namespace, entity) pair:
- <root>/
  - <namespace>/
    - .compass/
      - <entity_id>.compass.json

The whole document is rewritten on every save.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple
import os
import tempfile

from compass.errors import SerializationError, StorageError
from compass.logging import get_compass_logger
from .repository import Repository

logger = get_compass_logger("persistence")


class KeyValueStorage(ABC):
    """Minimal key-value interface the repository store writes through."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored text, or None when the key does not exist."""

    @abstractmethod
    def write(self, key: str, data: str) -> None:
        """Store text under key, replacing any previous value."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether a value is stored under key."""


class FileStorage(KeyValueStorage):
    """
    File-based storage.

    Keys are relative paths under base_dir. Writes go to a temporary file
    that is atomically renamed over the target.
    """

    def __init__(self, base_dir: Path):
        """
        Initialize storage.

        Args:
            base_dir: Directory all keys are resolved against
        """
        self.base_dir = Path(base_dir)

    def path_for(self, key: str) -> Path:
        """
        Resolve a key to a file path.

        Raises:
            StorageError: If the key points outside base_dir
        """
        base = self.base_dir.resolve()
        path = (base / key).resolve()
        if path != base and base not in path.parents:
            raise StorageError(f"Key escapes storage root: {key}", key=key)
        return path

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}", key=key) from e

    def write(self, key: str, data: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with self._atomic_write(path) as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}", key=key) from e

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    @contextmanager
    def _atomic_write(self, filepath: Path) -> Iterator:
        """
        Context manager for atomic file write operations (overwrite mode).

        Args:
            filepath: Target file path

        Yields:
            File object for writing
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                yield f

            # Atomic rename
            os.replace(temp_path, filepath)

        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise


class MemoryStorage(KeyValueStorage):
    """In-memory storage for tests and hosts without a filesystem."""

    def __init__(self, fail_writes: bool = False):
        self.data: Dict[str, str] = {}
        self.fail_writes = fail_writes
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, data: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write refused for {key}", key=key)
        self.data[key] = data
        self.write_count += 1

    def exists(self, key: str) -> bool:
        return key in self.data


class RepositoryStore:
    """
    Loads and saves whole repositories and caches them in memory.

    The cache is keyed by (namespace, entity_id) and lives as long as the
    store. It is not synchronized; callers keep to one writer per entity.
    """

    def __init__(self, storage: KeyValueStorage, compass_folder: str = ".compass"):
        """
        Initialize the store.

        Args:
            storage: Backend the repository documents are written to
            compass_folder: Folder name inside each namespace
        """
        self.storage = storage
        self.compass_folder = compass_folder
        self._cache: Dict[Tuple[str, str], Repository] = {}

    def key_for(self, namespace: str, entity_id: str) -> str:
        """Storage key of an entity's repository document."""
        return f"{namespace}/{self.compass_folder}/{entity_id}.compass.json"

    def load(self, namespace: str, entity_id: str) -> Optional[Repository]:
        """
        Load a repository, preferring the cached copy.

        Returns:
            Repository if found, None when nothing is stored yet or the stored
            document cannot be read
        """
        cached = self._cache.get((namespace, entity_id))
        if cached is not None:
            return cached

        key = self.key_for(namespace, entity_id)
        try:
            data = self.storage.read(key)
            if data is None:
                return None
            repository = Repository.from_json(data)
        except (StorageError, SerializationError) as e:
            logger.error(f"Failed to load repository {key}: {e}")
            return None

        self._cache[(namespace, entity_id)] = repository
        logger.debug(f"Loaded repository {key} ({repository.commit_count} commits)")
        return repository

    def save(self, namespace: str, repository: Repository) -> bool:
        """
        Write a repository in full and cache it.

        The cache is updated before the write so the in-memory state stays
        current even when the write fails.

        Returns:
            True if the document was written, False otherwise
        """
        self._cache[(namespace, repository.entity_id)] = repository
        key = self.key_for(namespace, repository.entity_id)
        try:
            self.storage.write(key, repository.to_json())
        except StorageError as e:
            logger.error(f"Failed to save repository {key}: {e}")
            return False

        logger.debug(f"Repository saved to {key}")
        return True

    def exists(self, namespace: str, entity_id: str) -> bool:
        """Check whether an entity has a stored or cached repository."""
        if (namespace, entity_id) in self._cache:
            return True
        try:
            return self.storage.exists(self.key_for(namespace, entity_id))
        except StorageError as e:
            logger.warning(f"Could not check repository for {entity_id}: {e}")
            return False

    def clear_cache(self) -> None:
        """Drop every cached repository."""
        self._cache.clear()
        logger.debug("Repository cache cleared")
