"""
Unit tests for the scene snapshot model.
"""

import json

import pytest

from compass.errors import SerializationError
from compass.version_control import (
    MapData,
    SceneSnapshot,
    SceneType,
    TileType,
    TokenData,
    TokenType,
)


def full_scene() -> SceneSnapshot:
    map_data = MapData.blank(4, 3)
    map_data.set_tile(1, 1, TileType.WALL)
    return SceneSnapshot(
        scene_id="scene-1",
        scene_name="Cave",
        scene_type=SceneType.EXPLORATION,
        description="A damp cave",
        status="active",
        map_data=map_data,
        tokens=[
            TokenData(character_id="hero", token_type=TokenType.PLAYER, grid_x=1, grid_y=2),
            TokenData(enemy_id="goblin", token_type=TokenType.ENEMY, grid_x=3, grid_y=0),
        ],
        active_character_ids=["hero"],
    )


class TestMapData:
    """Tests for MapData."""

    def test_blank_map_is_floor(self) -> None:
        """Test a blank map is filled with floor tiles."""
        map_data = MapData.blank(3, 2)
        assert map_data.tiles == [int(TileType.FLOOR)] * 6
        assert map_data.last_modified == map_data.created_date

    def test_default_size(self) -> None:
        """Test the default map is 15x15."""
        map_data = MapData()
        assert (map_data.width, map_data.height) == (15, 15)
        assert len(map_data.tiles) == 225

    def test_tile_access(self) -> None:
        """Test reading and writing tiles by grid position."""
        map_data = MapData.blank(3, 3)
        map_data.set_tile(2, 1, TileType.WATER)

        assert map_data.tile_at(2, 1) == TileType.WATER
        assert map_data.tiles[1 * 3 + 2] == int(TileType.WATER)

    def test_out_of_bounds(self) -> None:
        """Test out-of-bounds reads are EMPTY and writes are ignored."""
        map_data = MapData.blank(2, 2)
        before = list(map_data.tiles)

        map_data.set_tile(5, 5, TileType.WALL)

        assert map_data.tile_at(-1, 0) == TileType.EMPTY
        assert map_data.tile_at(2, 0) == TileType.EMPTY
        assert map_data.tiles == before


class TestSceneSnapshot:
    """Tests for SceneSnapshot."""

    def test_round_trip(self) -> None:
        """Test encode then decode gives an equal scene."""
        scene = full_scene()
        assert SceneSnapshot.decode(scene.encode()) == scene

    def test_round_trip_without_map(self) -> None:
        """Test scenes without a map keep map_data as None."""
        scene = SceneSnapshot(scene_id="s", scene_name="Tavern")
        restored = SceneSnapshot.decode(scene.encode())
        assert restored.map_data is None
        assert restored == scene

    def test_encoding_is_json(self) -> None:
        """Test the encoded form is a plain JSON document."""
        data = json.loads(full_scene().encode())
        assert data["scene_type"] == "Exploration"
        assert data["tokens"][1]["token_type"] == "Enemy"

    def test_display_name(self) -> None:
        """Test the display name is the scene name."""
        assert full_scene().display_name == "Cave"

    def test_active_characters(self) -> None:
        """Test adding and removing characters."""
        scene = SceneSnapshot(scene_id="s")
        scene.add_character("a")
        scene.add_character("a")
        scene.add_character("b")
        scene.remove_character("a")
        scene.remove_character("missing")
        assert scene.active_character_ids == ["b"]

    def test_token_identity(self) -> None:
        """Test token identity ignores descriptive fields."""
        t1 = TokenData(character_id="hero", character_name="Ayla", grid_x=1)
        t2 = TokenData(character_id="hero", character_name="Renamed", grid_x=1)
        assert t1.identity() == t2.identity()

    @pytest.mark.parametrize(
        "payload",
        [
            "",
            "not json",
            "{}",
            '{"scene_id": "s", "scene_type": "Dance"}',
            "[]",
            "1",
            '{"scene_id": "s", "map_data": [1, 2]}',
        ],
    )
    def test_decode_errors(self, payload: str) -> None:
        """Test invalid payloads raise SerializationError."""
        with pytest.raises(SerializationError):
            SceneSnapshot.decode(payload)

    def test_encode_error(self) -> None:
        """Test a field holding the wrong type fails to encode with SerializationError."""
        scene = SceneSnapshot(scene_id="s")
        scene.scene_type = "Combat"  # type: ignore[assignment]

        with pytest.raises(SerializationError):
            scene.encode()
