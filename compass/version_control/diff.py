"""
Structural comparison of scene snapshots.

This is not a generic tree diff. Each rule looks at one known part of the
scene and emits at most one human readable line, so status displays get
field-level granularity only.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .snapshot import MapData, SceneSnapshot, TokenData


@dataclass
class SceneDiff:
    """Changes between the snapshots of two commits."""

    from_commit_id: str
    to_commit_id: str
    changes: List[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        return len(self.changes) > 0

    def add_change(self, change: str) -> None:
        self.changes.append(change)

    def summary(self) -> str:
        """Generate a one-line summary of the diff."""
        if not self.has_changes():
            return "No changes"
        count = len(self.changes)
        return f"{count} change{'s' if count != 1 else ''}"

    def format(self) -> str:
        """
        Format diff for display.

        Returns:
            Multi-line string with a header, the summary and one line per change
        """
        lines = []
        lines.append("=" * 60)
        lines.append(f"Diff: {self.from_commit_id} -> {self.to_commit_id}")
        lines.append("=" * 60)
        lines.append(f"Summary: {self.summary()}")
        for change in self.changes:
            lines.append(f"  {change}")
        lines.append("=" * 60)
        return "\n".join(lines)


@dataclass
class CompassStatus:
    """Whether the working scene differs from the branch HEAD."""

    has_changes: bool = False
    current_branch: str = ""
    head_commit_id: str = ""
    modified_fields: List[str] = field(default_factory=list)

    def summary(self) -> str:
        if self.has_changes:
            return f"Unsaved changes ({len(self.modified_fields)} fields modified)"
        return f"On {self.current_branch} - No changes"


def compare_scenes(
    old: Optional[SceneSnapshot], new: Optional[SceneSnapshot]
) -> List[str]:
    """
    Compare two scenes field by field.

    Args:
        old: Earlier scene
        new: Later scene

    Returns:
        List of change descriptions, empty when the scenes match
    """
    changes: List[str] = []

    if old is None or new is None:
        changes.append("One or both scenes are null")
        return changes

    if old.scene_name != new.scene_name:
        changes.append(f"Scene name: '{old.scene_name}' → '{new.scene_name}'")

    if old.scene_type != new.scene_type:
        changes.append(
            f"Scene type: {old.scene_type.value} → {new.scene_type.value}"
        )

    if old.description != new.description:
        changes.append("Description modified")

    if old.status != new.status:
        changes.append(f"Status: '{old.status}' → '{new.status}'")

    changes.extend(_compare_maps(old.map_data, new.map_data))

    old_tokens = len(old.tokens)
    new_tokens = len(new.tokens)
    if old_tokens != new_tokens:
        changes.append(f"Token count: {old_tokens} → {new_tokens}")
    elif old_tokens > 0 and not tokens_equal(old.tokens, new.tokens):
        changes.append("Token positions modified")

    # Membership changes with equal counts are not reported
    old_chars = len(old.active_character_ids)
    new_chars = len(new.active_character_ids)
    if old_chars != new_chars:
        changes.append(f"Active characters: {old_chars} → {new_chars}")

    return changes


def _compare_maps(old: Optional[MapData], new: Optional[MapData]) -> List[str]:
    if old is None and new is None:
        return []
    if old is None or new is None:
        return ["Map data added or removed"]

    if old.width != new.width or old.height != new.height:
        return [f"Map size: {old.width}x{old.height} → {new.width}x{new.height}"]

    if not tiles_equal(old.tiles, new.tiles):
        return ["Map tiles modified"]
    return []


def tiles_equal(tiles1: Optional[Sequence[int]], tiles2: Optional[Sequence[int]]) -> bool:
    """Compare two flattened tile arrays element-wise."""
    if tiles1 is None and tiles2 is None:
        return True
    if tiles1 is None or tiles2 is None:
        return False
    if len(tiles1) != len(tiles2):
        return False
    return all(a == b for a, b in zip(tiles1, tiles2))


def tokens_equal(tokens1: Sequence[TokenData], tokens2: Sequence[TokenData]) -> bool:
    """Compare two token lists in order on their identifying fields."""
    if len(tokens1) != len(tokens2):
        return False
    return all(t1.identity() == t2.identity() for t1, t2 in zip(tokens1, tokens2))
