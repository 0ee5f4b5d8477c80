"""
Compass engine: Git-like operations over per-entity scene repositories.

Git equivalents:
- working document (CurrentScene.json) = working directory
- canonical store (the campaign)        = remote main branch
- repository documents under .compass/ = the .git folder

Every operation is a self-contained, blocking call against one repository.
Lookups fail soft: a missing repository or commit gives an empty result and a
logged warning. Writes always apply in memory first; a failed write to storage
or a rejected push is logged and reported through CommitResult, and the
in-memory change is not rolled back. Until the next successful save such a
change exists only in this process. A stored repository that cannot be
loaded is reported as an error and never overwritten by a new one.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple, Type

from compass.config import Config, EngineConfig, config
from compass.errors import CompassError, PushFailedError, SerializationError, StorageError
from compass.logging import get_compass_logger, log_repository_operation
from .collaborators import AuthorProvider, Broadcaster, CanonicalStore, WorkingDocument
from .diff import CompassStatus, SceneDiff, compare_scenes
from .repository import Commit, Repository, create_commit_id, create_timestamp
from .snapshot import SceneSnapshot, Snapshot
from .storage import FileStorage, RepositoryStore

logger = get_compass_logger("engine")

Comparator = Callable[[Optional[Any], Optional[Any]], List[str]]


@dataclass
class CommitResult:
    """
    Outcome of a write operation.

    When commit is set it is part of the in-memory repository, and the flags
    say which of the follow-up steps succeeded. commit is None when nothing
    could be recorded: the snapshot did not encode, or a stored repository
    exists but could not be loaded. errors then holds the cause.

    Attributes:
        commit: The new commit, or None if no commit was created
        persisted: Whether the repository document was written
        pushed: Whether the canonical store accepted the snapshot (None if
            no push was attempted)
        working_saved: Whether the working document was written (None if not
            attempted)
        errors: Failures of the follow-up steps
    """

    commit: Optional[Commit]
    persisted: bool
    pushed: Optional[bool] = None
    working_saved: Optional[bool] = None
    errors: List[CompassError] = field(default_factory=list)

    @property
    def commit_id(self) -> str:
        return self.commit.commit_id if self.commit else ""

    @property
    def ok(self) -> bool:
        return not self.errors


class CompassEngine:
    """
    Version control for the scenes of one namespace (campaign).

    Provides operations for:
    - Initializing a repository with a root commit
    - Committing, checking out and reverting snapshots
    - Reading history, status and diffs
    - Saving through to the working document and the canonical store
    """

    def __init__(
        self,
        store: RepositoryStore,
        namespace: str,
        author_provider: Optional[AuthorProvider] = None,
        canonical_store: Optional[CanonicalStore] = None,
        broadcaster: Optional[Broadcaster] = None,
        working_document: Optional[WorkingDocument] = None,
        snapshot_type: Type[Any] = SceneSnapshot,
        comparator: Comparator = compare_scenes,
        settings: Optional[EngineConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Repository persistence and cache
            namespace: Campaign the repositories belong to
            author_provider: Source of the current user's name
            canonical_store: Authoritative document store pushed to on main
            broadcaster: Notifies remote peers after a save
            working_document: Location written by save_and_commit()
            snapshot_type: Class used to decode committed snapshots
            comparator: Structural comparison used by status() and diff()
            settings: Engine defaults (global configuration if omitted)
        """
        self.store = store
        self.namespace = namespace
        self.author_provider = author_provider
        self.canonical_store = canonical_store
        self.broadcaster = broadcaster
        self.working_document = working_document
        self.snapshot_type = snapshot_type
        self.comparator = comparator
        self.settings = settings or config.engine

    @classmethod
    def from_config(
        cls, namespace: str, cfg: Optional[Config] = None, **kwargs: Any
    ) -> "CompassEngine":
        """
        Build a file-backed engine from configuration.

        Repositories and the working document live under the configured
        storage root. Extra keyword arguments are passed to the constructor.
        """
        cfg = cfg or config
        storage = FileStorage(cfg.storage.root_path)
        kwargs.setdefault(
            "working_document",
            WorkingDocument(storage, cfg.storage.working_document_name),
        )
        return cls(
            RepositoryStore(storage, cfg.storage.compass_folder),
            namespace,
            settings=cfg.engine,
            **kwargs,
        )

    # Core operations

    def init(
        self, entity_id: str, name: str, initial_snapshot: Snapshot
    ) -> Optional[Repository]:
        """
        Initialize a repository for an entity.

        Equivalent to: git init. Idempotent: an existing repository is
        returned unchanged.

        Args:
            entity_id: Tracked entity (scene) id
            name: Display name of the entity
            initial_snapshot: Content of the root commit

        Returns:
            The new or existing repository, or None if a stored repository
            cannot be loaded or the snapshot cannot be encoded
        """
        existing, error = self._load_for_write(entity_id)
        if existing is not None:
            logger.info(f"Repository already exists for scene {name}")
            return existing
        if error is not None:
            return None

        try:
            encoded = initial_snapshot.encode()
        except SerializationError as e:
            logger.error(f"Could not encode initial snapshot for scene {name}: {e}")
            return None

        return self._create(entity_id, name, encoded)

    def _create(self, entity_id: str, name: str, encoded: str) -> Repository:
        """Create, persist and cache a repository holding only a root commit."""
        main_branch = self.settings.main_branch
        repository = Repository.create(entity_id, name, main_branch)

        root = self._new_commit(
            repository, self.settings.initial_commit_message, encoded, parent_id=""
        )
        repository.append_commit(root)
        repository.advance_branch(main_branch, root.commit_id)
        repository.working_snapshot = encoded

        if not self.store.save(self.namespace, repository):
            logger.warning(
                f"Repository for {name} created in memory but not persisted"
            )

        logger.info(
            f"Initialized repository for scene {name} "
            f"with initial commit {root.commit_id}"
        )
        return repository

    def commit(self, entity_id: str, snapshot: Snapshot, message: str) -> CommitResult:
        """
        Commit a snapshot to the current branch.

        Equivalent to: git commit -m "message". Creates the repository on
        demand and pushes to the canonical store when on the main branch.

        Args:
            entity_id: Tracked entity id
            snapshot: Current state to record
            message: Commit message

        Returns:
            CommitResult with the new commit and follow-up outcomes

        Example:
            >>> result = engine.commit("scene-1", scene, "Move goblins")
            >>> result.commit.parent_id
        """
        result, repository = self._commit(entity_id, snapshot, message)
        if repository is None:
            return result
        if repository.current_branch == self.settings.main_branch:
            self._push(entity_id, snapshot, result)
        return result

    def checkout(self, entity_id: str, commit_id: str) -> Optional[Any]:
        """
        Restore the working snapshot from a commit.

        Equivalent to: git checkout <commit-id> for the working directory
        only. No commit is created and no branch moves.

        Returns:
            The commit's snapshot, or None if it cannot be found or decoded
        """
        repository = self.store.load(self.namespace, entity_id)
        if repository is None:
            logger.warning(f"Repository not found for scene {entity_id}")
            return None

        commit = repository.get_commit(commit_id)
        if commit is None:
            logger.warning(f"Commit {commit_id} not found")
            return None

        snapshot = self._decode(commit)
        if snapshot is None:
            return None

        repository.working_snapshot = commit.snapshot
        if not self.store.save(self.namespace, repository):
            logger.warning(f"Checkout of {commit_id} applied in memory but not persisted")

        log_repository_operation(logger, "checkout", entity_id=entity_id, commit_id=commit_id)
        logger.info(f"Checked out commit {commit_id}")
        return snapshot

    def log(self, entity_id: str, max_count: Optional[int] = None) -> List[Commit]:
        """
        Get the commit history of an entity, newest first.

        Equivalent to: git log -n <max_count>.
        """
        if max_count is None:
            max_count = self.settings.default_log_count

        repository = self.store.load(self.namespace, entity_id)
        if repository is None:
            logger.warning(f"No repository found for scene {entity_id}")
            return []

        return repository.history(max_count)

    def status(self, entity_id: str, snapshot: Snapshot) -> CompassStatus:
        """
        Compare a working snapshot with the branch HEAD.

        Equivalent to: git status.
        """
        status = CompassStatus()

        repository, error = self._load_for_write(entity_id)
        if error is not None:
            status.has_changes = True
            status.modified_fields.append("Compass history could not be loaded")
            return status
        if repository is None:
            status.has_changes = True
            status.modified_fields.append("New scene (not yet tracked by Compass)")
            return status

        status.current_branch = repository.current_branch
        head = repository.head_commit()
        status.head_commit_id = head.commit_id if head else ""

        if head is None:
            status.has_changes = True
            status.modified_fields.append("No commits yet")
            return status

        status.modified_fields = self.comparator(self._decode(head), snapshot)
        status.has_changes = len(status.modified_fields) > 0
        return status

    def diff(
        self, entity_id: str, from_commit_id: str, to_commit_id: str
    ) -> Optional[SceneDiff]:
        """
        Compare the snapshots of two commits.

        Equivalent to: git diff <from> <to>.

        Returns:
            SceneDiff, or None if the repository or either commit is missing
        """
        repository = self.store.load(self.namespace, entity_id)
        if repository is None:
            logger.warning(f"Repository not found for scene {entity_id}")
            return None

        from_commit = repository.get_commit(from_commit_id)
        to_commit = repository.get_commit(to_commit_id)
        if from_commit is None or to_commit is None:
            logger.warning(
                f"One or both commits not found: {from_commit_id}, {to_commit_id}"
            )
            return None

        changes = self.comparator(self._decode(from_commit), self._decode(to_commit))
        return SceneDiff(from_commit_id, to_commit_id, changes)

    def revert(
        self, entity_id: str, target_commit_id: str, message: Optional[str] = None
    ) -> Optional[Any]:
        """
        Return to an earlier commit's content.

        This creates a new commit with the old snapshot; history is never
        truncated and the branch never moves backwards.

        Returns:
            The reverted snapshot, or None if the target cannot be found
        """
        repository = self.store.load(self.namespace, entity_id)
        if repository is None:
            logger.warning(f"Repository not found for scene {entity_id}")
            return None

        target = repository.get_commit(target_commit_id)
        if target is None:
            logger.warning(f"Commit {target_commit_id} not found")
            return None

        snapshot = self._decode(target)
        if snapshot is None:
            return None

        result = self.commit(
            entity_id, snapshot, message or f"Revert to commit {target_commit_id}"
        )
        if result.commit is None:
            logger.error(f"Revert to commit {target_commit_id} was not recorded")
            return None
        logger.info(
            f"Reverted to commit {target_commit_id} with new commit {result.commit_id}"
        )
        return snapshot

    # Save and load operations

    def save_and_commit(
        self, entity_id: str, snapshot: Snapshot, message: Optional[str] = None
    ) -> CommitResult:
        """
        Commit, write the working document and push to the canonical store.

        This is the call an editor makes on a normal save. After a successful
        push the snapshot is broadcast to remote peers.
        """
        if not message:
            message = f"Auto-save at {datetime.now().strftime(self.settings.auto_save_time_format)}"

        result, repository = self._commit(entity_id, snapshot, message)

        if self.working_document is not None:
            result.working_saved = self.working_document.save(snapshot)
            if not result.working_saved:
                result.errors.append(
                    StorageError(
                        "Working document not saved", key=self.working_document.key
                    )
                )

        # A save still reaches the canonical store when history could not be recorded
        if repository is None or repository.current_branch == self.settings.main_branch:
            self._push(entity_id, snapshot, result)

        if result.pushed:
            self._broadcast(entity_id, snapshot)

        logger.info(f"Save and commit complete - {result.commit_id}")
        return result

    def pull(self, entity_id: str) -> Optional[Any]:
        """
        Fetch the authoritative snapshot from the canonical store.

        Equivalent to: git pull origin main, without touching the repository.
        """
        if self.canonical_store is None:
            logger.error("Canonical store not available")
            return None

        try:
            snapshot = self.canonical_store.get(entity_id)
        except Exception as e:
            logger.error(f"Pull failed for scene {entity_id}: {e}")
            return None

        if snapshot is None:
            logger.warning(f"Scene {entity_id} not found in canonical store")
        else:
            logger.info(f"Pulled latest for scene {entity_id}")
        return snapshot

    # Utility methods

    def has_repository(self, entity_id: str) -> bool:
        """Check if an entity has a Compass repository."""
        return self.store.exists(self.namespace, entity_id)

    def repository_summary(self, entity_id: str) -> str:
        """Get summary info about an entity's repository."""
        repository = self.store.load(self.namespace, entity_id)
        if repository is None:
            return "No Compass history"
        return repository.summary()

    def clear_cache(self) -> None:
        """Clear the repository cache."""
        self.store.clear_cache()
        logger.info("Cache cleared")

    def current_author(self) -> str:
        """Name recorded on new commits, falling back to the configured default."""
        if self.author_provider is None:
            return self.settings.default_author
        try:
            username = self.author_provider.current_user()
        except Exception as e:
            logger.warning(f"Author provider failed: {e}")
            return self.settings.default_author
        return username or self.settings.default_author

    def _commit(
        self, entity_id: str, snapshot: Snapshot, message: str
    ) -> Tuple[CommitResult, Optional[Repository]]:
        """
        Append a commit and persist, without pushing.

        The repository is None when no commit could be made; the result then
        carries the error and nothing was changed.
        """
        try:
            encoded = snapshot.encode()
        except SerializationError as e:
            logger.error(f"Could not encode snapshot for scene {entity_id}: {e}")
            return CommitResult(commit=None, persisted=False, errors=[e]), None

        repository, error = self._load_for_write(entity_id)
        if error is not None:
            return CommitResult(commit=None, persisted=False, errors=[error]), None
        if repository is None:
            repository = self._create(entity_id, snapshot.display_name or entity_id, encoded)

        branch = repository.get_branch(repository.current_branch)
        parent_id = branch.head_commit_id if branch else ""

        commit = self._new_commit(repository, message, encoded, parent_id)
        repository.append_commit(commit)
        if branch is not None:
            repository.advance_branch(branch.name, commit.commit_id)
        repository.working_snapshot = encoded

        result = CommitResult(
            commit=commit, persisted=self.store.save(self.namespace, repository)
        )
        if not result.persisted:
            result.errors.append(
                StorageError(
                    f"Commit {commit.commit_id} is live in memory but was not persisted",
                    key=self.store.key_for(self.namespace, entity_id),
                )
            )
            logger.warning(
                f"Commit {commit.commit_id} is live in memory but was not persisted"
            )

        log_repository_operation(
            logger,
            "commit",
            entity_id=entity_id,
            commit_id=commit.commit_id,
            parent_id=parent_id,
        )
        logger.info(f'Committed {commit.commit_id} - "{message}"')
        return result, repository

    def _load_for_write(
        self, entity_id: str
    ) -> Tuple[Optional[Repository], Optional[StorageError]]:
        """
        Load a repository, telling "nothing stored" apart from "unreadable".

        Returns:
            (repository, None) when loaded, (None, None) when nothing is
            stored, and (None, error) when a stored document cannot be loaded.
            A new repository must never be written over the last case.
        """
        repository = self.store.load(self.namespace, entity_id)
        if repository is not None or not self.store.exists(self.namespace, entity_id):
            return repository, None

        key = self.store.key_for(self.namespace, entity_id)
        logger.error(
            f"Repository for scene {entity_id} exists at {key} but could not be loaded, "
            f"leaving it untouched"
        )
        return None, StorageError(f"Repository document could not be loaded: {key}", key=key)

    def _new_commit(
        self, repository: Repository, message: str, encoded: str, parent_id: str
    ) -> Commit:
        commit_id = create_commit_id()
        while repository.get_commit(commit_id) is not None:
            commit_id = create_commit_id()
        return Commit(
            commit_id=commit_id,
            parent_id=parent_id,
            message=message,
            author=self.current_author(),
            timestamp=create_timestamp(),
            snapshot=encoded,
        )

    def _decode(self, commit: Commit) -> Optional[Any]:
        try:
            return self.snapshot_type.decode(commit.snapshot)
        except SerializationError as e:
            logger.error(f"Could not deserialize snapshot from commit {commit.commit_id}: {e}")
            return None

    def _push(self, entity_id: str, snapshot: Snapshot, result: CommitResult) -> None:
        """Push to the canonical store. Equivalent to: git push origin main."""
        if self.canonical_store is None:
            logger.debug("No canonical store configured, skipping push")
            return

        try:
            result.pushed = bool(self.canonical_store.push(entity_id, snapshot))
        except Exception as e:
            logger.error(f"Push to main raised for scene {entity_id}: {e}")
            result.pushed = False

        if result.pushed:
            logger.info(f"Pushed to main - scene {entity_id} updated in campaign")
        else:
            result.errors.append(
                PushFailedError(f"Push to main failed for scene {entity_id}", entity_id)
            )
            logger.warning(f"Failed to push to main - scene {entity_id} not found in campaign")

    def _broadcast(self, entity_id: str, snapshot: Snapshot) -> None:
        if self.broadcaster is None:
            logger.warning("No broadcaster configured, remote peers were not notified")
            return
        try:
            self.broadcaster.broadcast(entity_id, snapshot)
        except Exception as e:
            logger.error(f"Broadcast failed for scene {entity_id}: {e}")
