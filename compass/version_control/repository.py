"""
Commit, branch and repository records for Compass.

A Repository holds the full history of one tracked entity. All operations in
this module are pure; persistence lives in storage.py.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set
import json
import uuid

from compass.errors import NotFoundError, SerializationError

MAIN_BRANCH = "main"


def create_commit_id() -> str:
    """Generate a short commit ID similar to Git's abbreviated hash."""
    return uuid.uuid4().hex[:8]


def create_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class Commit:
    """
    An immutable entry in a repository's history.

    The snapshot is stored encoded, exactly as it was committed.

    Attributes:
        commit_id: Unique identifier within the repository
        parent_id: Previous commit on the branch, empty for the root commit
        message: Commit message
        author: Name of the user who committed
        timestamp: Creation time
        snapshot: Encoded snapshot payload
    """

    commit_id: str
    parent_id: str
    message: str
    author: str
    timestamp: str
    snapshot: str

    @property
    def is_root(self) -> bool:
        return not self.parent_id

    def format_line(self) -> str:
        """One-line description used by history listings."""
        return f"{self.commit_id} | {self.author} | {self.timestamp} | {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commit_id": self.commit_id,
            "parent_id": self.parent_id,
            "message": self.message,
            "author": self.author,
            "timestamp": self.timestamp,
            "snapshot": self.snapshot,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        return cls(
            commit_id=data["commit_id"],
            parent_id=data.get("parent_id") or "",
            message=data.get("message", ""),
            author=data.get("author", ""),
            timestamp=data.get("timestamp", ""),
            snapshot=data.get("snapshot", ""),
        )


@dataclass
class Branch:
    """A named pointer to the latest commit in a line of history."""

    name: str
    entity_id: str
    head_commit_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "entity_id": self.entity_id,
            "head_commit_id": self.head_commit_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Branch":
        return cls(
            name=data["name"],
            entity_id=data.get("entity_id", ""),
            head_commit_id=data.get("head_commit_id") or "",
        )


@dataclass
class Repository:
    """
    Complete version history of one tracked entity.

    Commits are append-only and stored in creation order. The repository
    starts with a single branch, "main", which is also the current branch.
    """

    entity_id: str
    display_name: str
    commits: List[Commit] = field(default_factory=list)
    branches: List[Branch] = field(default_factory=list)
    current_branch: str = MAIN_BRANCH
    working_snapshot: str = ""

    @classmethod
    def create(
        cls, entity_id: str, display_name: str, branch_name: str = MAIN_BRANCH
    ) -> "Repository":
        """Create an empty repository with its default branch."""
        return cls(
            entity_id=entity_id,
            display_name=display_name,
            branches=[Branch(name=branch_name, entity_id=entity_id)],
            current_branch=branch_name,
        )

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    def get_branch(self, name: str) -> Optional[Branch]:
        """Get a branch by name."""
        return next((b for b in self.branches if b.name == name), None)

    def get_commit(self, commit_id: str) -> Optional[Commit]:
        """Get a commit by ID."""
        if not commit_id:
            return None
        return next((c for c in self.commits if c.commit_id == commit_id), None)

    def head_commit(self) -> Optional[Commit]:
        """Get the latest commit on the current branch."""
        branch = self.get_branch(self.current_branch)
        if branch is None or not branch.head_commit_id:
            return None
        return self.get_commit(branch.head_commit_id)

    def history(self, max_count: int = 10) -> List[Commit]:
        """
        Get commit history for the current branch.

        Walks parent links from HEAD toward the root, newest first. The walk
        stops at the root, at a missing parent, or at an id it has already
        visited, so inconsistent data cannot make it loop.

        Args:
            max_count: Maximum number of commits to return

        Returns:
            List of commits in reverse chronological order
        """
        commits: List[Commit] = []
        visited: Set[str] = set()
        current = self.head_commit()

        while current is not None and len(commits) < max_count:
            if current.commit_id in visited:
                break
            visited.add(current.commit_id)
            commits.append(current)
            if current.is_root:
                break
            current = self.get_commit(current.parent_id)

        return commits

    def append_commit(self, commit: Commit) -> None:
        """
        Append a commit to the history.

        Raises:
            ValueError: If a commit with the same id already exists
            NotFoundError: If the commit's parent is not in this repository
        """
        if self.get_commit(commit.commit_id) is not None:
            raise ValueError(f"Duplicate commit id: {commit.commit_id}")
        if commit.parent_id and self.get_commit(commit.parent_id) is None:
            raise NotFoundError(f"Parent commit not found: {commit.parent_id}")
        self.commits.append(commit)

    def advance_branch(self, name: str, commit_id: str) -> Branch:
        """
        Point a branch at an existing commit.

        Raises:
            NotFoundError: If the branch or the commit does not exist
        """
        branch = self.get_branch(name)
        if branch is None:
            raise NotFoundError(f"Branch not found: {name}")
        if self.get_commit(commit_id) is None:
            raise NotFoundError(f"Commit not found: {commit_id}")
        branch.head_commit_id = commit_id
        return branch

    def summary(self) -> str:
        """Short description of the repository for status displays."""
        head = self.head_commit()
        last_update = head.timestamp if head else "Unknown"
        return f"{self.commit_count} commits, last: {last_update}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert repository to dictionary for serialization."""
        return {
            "entity_id": self.entity_id,
            "display_name": self.display_name,
            "commits": [c.to_dict() for c in self.commits],
            "branches": [b.to_dict() for b in self.branches],
            "current_branch": self.current_branch,
            "working_snapshot": self.working_snapshot,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Repository":
        """Create repository from dictionary."""
        return cls(
            entity_id=data["entity_id"],
            display_name=data.get("display_name", ""),
            commits=[Commit.from_dict(c) for c in data.get("commits", [])],
            branches=[Branch.from_dict(b) for b in data.get("branches", [])],
            current_branch=data.get("current_branch", MAIN_BRANCH),
            working_snapshot=data.get("working_snapshot", ""),
        )

    def to_json(self) -> str:
        """Convert repository to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "Repository":
        """
        Create repository from JSON string.

        Raises:
            SerializationError: If the document is not a valid repository
        """
        try:
            return cls.from_dict(json.loads(json_str))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise SerializationError(f"Invalid repository document: {e}") from e
