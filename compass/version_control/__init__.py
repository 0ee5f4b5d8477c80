"""
Version control for scene snapshots.

Provides git-like operations (init, commit, checkout, log, status, diff,
revert) over per-scene repositories.
"""

from .snapshot import (
    Snapshot,
    SceneSnapshot,
    SceneType,
    MapData,
    TokenData,
    TokenType,
    TileType,
)

from .repository import (
    Commit,
    Branch,
    Repository,
    MAIN_BRANCH,
    create_commit_id,
)

from .diff import (
    SceneDiff,
    CompassStatus,
    compare_scenes,
)

from .storage import (
    KeyValueStorage,
    FileStorage,
    MemoryStorage,
    RepositoryStore,
)

from .collaborators import (
    AuthorProvider,
    CanonicalStore,
    Broadcaster,
    StaticAuthorProvider,
    InMemoryCanonicalStore,
    RecordingBroadcaster,
    WorkingDocument,
)

from .engine import CompassEngine, CommitResult

__all__ = [
    # Snapshot
    "Snapshot",
    "SceneSnapshot",
    "SceneType",
    "MapData",
    "TokenData",
    "TokenType",
    "TileType",
    # Repository
    "Commit",
    "Branch",
    "Repository",
    "MAIN_BRANCH",
    "create_commit_id",
    # Diff
    "SceneDiff",
    "CompassStatus",
    "compare_scenes",
    # Storage
    "KeyValueStorage",
    "FileStorage",
    "MemoryStorage",
    "RepositoryStore",
    # Collaborators
    "AuthorProvider",
    "CanonicalStore",
    "Broadcaster",
    "StaticAuthorProvider",
    "InMemoryCanonicalStore",
    "RecordingBroadcaster",
    "WorkingDocument",
    # Engine
    "CompassEngine",
    "CommitResult",
]
