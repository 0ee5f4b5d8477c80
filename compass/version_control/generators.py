"""
Test data generators for scene snapshots.

Hypothesis strategies used by the property-based tests of the engine.
"""

from hypothesis import strategies as st

from .snapshot import MapData, SceneSnapshot, SceneType, TileType, TokenData, TokenType

_names = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ '-",
    min_size=1,
    max_size=20,
)
_ids = st.text(alphabet="abcdef0123456789", min_size=4, max_size=8)


@st.composite
def map_data_strategy(draw) -> MapData:  # type: ignore[no-untyped-def]
    """Generate a small map with random tiles."""
    width = draw(st.integers(min_value=1, max_value=6))
    height = draw(st.integers(min_value=1, max_value=6))
    tiles = draw(
        st.lists(
            st.sampled_from([int(t) for t in TileType]),
            min_size=width * height,
            max_size=width * height,
        )
    )
    return MapData(
        width=width,
        height=height,
        tiles=tiles,
        created_date="2024-01-01 00:00:00",
    )


@st.composite
def token_strategy(draw) -> TokenData:  # type: ignore[no-untyped-def]
    """Generate a token placed somewhere on a small grid."""
    token_type = draw(st.sampled_from(list(TokenType)))
    return TokenData(
        character_id=draw(_ids) if token_type != TokenType.ENEMY else "",
        character_name=draw(_names),
        enemy_id=draw(_ids) if token_type == TokenType.ENEMY else "",
        token_type=token_type,
        grid_x=draw(st.integers(min_value=0, max_value=14)),
        grid_y=draw(st.integers(min_value=0, max_value=14)),
    )


@st.composite
def scene_strategy(draw, scene_id: str = "scene-1") -> SceneSnapshot:  # type: ignore[no-untyped-def]
    """Generate a complete scene."""
    return SceneSnapshot(
        scene_id=scene_id,
        scene_name=draw(_names),
        scene_type=draw(st.sampled_from(list(SceneType))),
        description=draw(st.text(max_size=40)),
        status=draw(st.sampled_from(["", "draft", "active", "completed"])),
        map_data=draw(st.one_of(st.none(), map_data_strategy())),
        tokens=draw(st.lists(token_strategy(), max_size=5)),
        active_character_ids=draw(st.lists(_ids, max_size=4, unique=True)),
    )
