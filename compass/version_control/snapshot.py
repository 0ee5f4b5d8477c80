"""
Snapshot contract and the scene document tracked by Compass.

The engine only needs a payload it can encode to a string and decode back.
The scene classes below are the document the editor commits; they also define
the shape the structural comparison in diff.py understands.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Protocol, Tuple, Type, TypeVar
import json
import uuid

from compass.errors import SerializationError

S = TypeVar("S", bound="Snapshot")


class Snapshot(Protocol):
    """Protocol for payloads that can be committed."""

    @property
    def display_name(self) -> str:
        """Human readable name used when a repository is created on demand."""
        ...

    def encode(self) -> str:
        """Serialize the snapshot; raises SerializationError if it cannot."""
        ...

    @classmethod
    def decode(cls: Type[S], data: str) -> S:
        """Rebuild a snapshot; raises SerializationError on bad input."""
        ...


class SceneType(str, Enum):
    """Kinds of scenes in a campaign."""

    ROLEPLAY = "Roleplay"
    COMBAT = "Combat"
    EXPLORATION = "Exploration"


class TokenType(str, Enum):
    """Who controls a token."""

    PLAYER = "Player"
    NPC = "NPC"
    ENEMY = "Enemy"


class TileType(IntEnum):
    """Tile kinds stored in MapData.tiles."""

    EMPTY = 0
    FLOOR = 1
    WALL = 2
    WATER = 3
    DOOR = 4
    GRASS = 5
    STONE = 6
    WOOD = 7
    DIFFICULT = 8


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class MapData:
    """
    Grid layout of a scene.

    Tiles are stored as a flattened row-major list of TileType values.
    """

    width: int = 15
    height: int = 15
    tiles: List[int] = field(default_factory=list)
    created_date: str = field(default_factory=_now)
    last_modified: str = ""

    def __post_init__(self) -> None:
        if not self.tiles:
            self.tiles = [int(TileType.FLOOR)] * (self.width * self.height)
        if not self.last_modified:
            self.last_modified = self.created_date

    @classmethod
    def blank(cls, width: int, height: int) -> "MapData":
        """Create a map of the given size filled with floor tiles."""
        return cls(width=width, height=height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> TileType:
        """Get the tile at a grid position, EMPTY when out of bounds."""
        if not self.in_bounds(x, y):
            return TileType.EMPTY
        return TileType(self.tiles[y * self.width + x])

    def set_tile(self, x: int, y: int, tile: TileType) -> None:
        """Set the tile at a grid position; out-of-bounds writes are ignored."""
        if not self.in_bounds(x, y):
            return
        self.tiles[y * self.width + x] = int(tile)
        self.last_modified = _now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tiles": list(self.tiles),
            "created_date": self.created_date,
            "last_modified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapData":
        return cls(
            width=data["width"],
            height=data["height"],
            tiles=list(data.get("tiles", [])),
            created_date=data.get("created_date", ""),
            last_modified=data.get("last_modified", ""),
        )


@dataclass
class TokenData:
    """A character or enemy token placed on the scene grid."""

    character_id: str = ""
    character_name: str = ""
    character_class: str = ""
    token_file_name: str = ""
    character_description: str = ""
    enemy_id: str = ""
    token_type: TokenType = TokenType.PLAYER
    grid_x: int = 0
    grid_y: int = 0

    def identity(self) -> Tuple[TokenType, str, str, int, int]:
        """Fields that decide whether two tokens are the same placement."""
        return (
            self.token_type,
            self.character_id,
            self.enemy_id,
            self.grid_x,
            self.grid_y,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "character_id": self.character_id,
            "character_name": self.character_name,
            "character_class": self.character_class,
            "token_file_name": self.token_file_name,
            "character_description": self.character_description,
            "enemy_id": self.enemy_id,
            "token_type": self.token_type.value,
            "grid_x": self.grid_x,
            "grid_y": self.grid_y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenData":
        return cls(
            character_id=data.get("character_id", ""),
            character_name=data.get("character_name", ""),
            character_class=data.get("character_class", ""),
            token_file_name=data.get("token_file_name", ""),
            character_description=data.get("character_description", ""),
            enemy_id=data.get("enemy_id", ""),
            token_type=TokenType(data.get("token_type", TokenType.PLAYER.value)),
            grid_x=data.get("grid_x", 0),
            grid_y=data.get("grid_y", 0),
        )


@dataclass
class SceneSnapshot:
    """
    Complete state of one scene at a point in time.

    This is the unit of version control - each commit stores one encoded
    SceneSnapshot.
    """

    scene_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    scene_name: str = ""
    scene_type: SceneType = SceneType.ROLEPLAY
    description: str = ""
    status: str = ""
    map_data: Optional[MapData] = None
    tokens: List[TokenData] = field(default_factory=list)
    active_character_ids: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.scene_name

    def add_character(self, character_id: str) -> None:
        """Mark a character as present in the scene."""
        if character_id not in self.active_character_ids:
            self.active_character_ids.append(character_id)

    def remove_character(self, character_id: str) -> None:
        if character_id in self.active_character_ids:
            self.active_character_ids.remove(character_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scene to dictionary for serialization."""
        return {
            "scene_id": self.scene_id,
            "scene_name": self.scene_name,
            "scene_type": self.scene_type.value,
            "description": self.description,
            "status": self.status,
            "map_data": self.map_data.to_dict() if self.map_data else None,
            "tokens": [token.to_dict() for token in self.tokens],
            "active_character_ids": list(self.active_character_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneSnapshot":
        """Create scene from dictionary."""
        map_data = data.get("map_data")
        return cls(
            scene_id=data["scene_id"],
            scene_name=data.get("scene_name", ""),
            scene_type=SceneType(data.get("scene_type", SceneType.ROLEPLAY.value)),
            description=data.get("description", ""),
            status=data.get("status", ""),
            map_data=MapData.from_dict(map_data) if map_data else None,
            tokens=[TokenData.from_dict(t) for t in data.get("tokens", [])],
            active_character_ids=list(data.get("active_character_ids", [])),
        )

    def encode(self) -> str:
        """
        Encode the scene as JSON.

        Raises:
            SerializationError: If a field holds a value that cannot be encoded
        """
        try:
            return json.dumps(self.to_dict(), indent=2)
        except (ValueError, TypeError, AttributeError) as e:
            raise SerializationError(f"Could not encode scene: {e}") from e

    @classmethod
    def decode(cls, data: str) -> "SceneSnapshot":
        """Decode a scene from JSON produced by encode()."""
        if not data:
            raise SerializationError("Empty scene payload")
        try:
            return cls.from_dict(json.loads(data))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise SerializationError(f"Could not decode scene: {e}") from e
