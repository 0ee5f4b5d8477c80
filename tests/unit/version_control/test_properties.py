"""
Property-based tests for Compass history and scene comparison.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from compass.version_control import (
    CompassEngine,
    MemoryStorage,
    RepositoryStore,
    SceneSnapshot,
    StaticAuthorProvider,
    compare_scenes,
)
from compass.version_control.generators import scene_strategy


def make_engine() -> CompassEngine:
    return CompassEngine(
        RepositoryStore(MemoryStorage()),
        "Campaign",
        author_provider=StaticAuthorProvider("dm"),
    )


class TestSnapshotProperties:
    """Properties of encoding and comparing scenes."""

    @given(scene=scene_strategy())
    def test_encode_decode_identity(self, scene: SceneSnapshot) -> None:
        """Test decoding an encoded scene gives an equal scene."""
        assert SceneSnapshot.decode(scene.encode()) == scene

    @given(scene=scene_strategy())
    def test_scene_equals_itself(self, scene: SceneSnapshot) -> None:
        """Test comparing a scene with its own round trip finds no changes."""
        assert compare_scenes(scene, SceneSnapshot.decode(scene.encode())) == []


class TestHistoryProperties:
    """Properties of repositories built through the engine."""

    @given(
        initial=scene_strategy(),
        edits=st.lists(scene_strategy(), min_size=0, max_size=6),
    )
    @settings(max_examples=30, deadline=None)
    def test_chain_is_linear(self, initial, edits) -> None:
        """Test every commit's parent is the previous HEAD and the root is unique."""
        engine = make_engine()
        engine.init("scene-1", "Scene", initial)
        for i, edit in enumerate(edits):
            engine.commit("scene-1", edit, f"edit {i}")

        history = engine.log("scene-1", max_count=len(edits) + 5)

        assert len(history) == len(edits) + 1
        assert [c.parent_id for c in history].count("") == 1
        for newer, older in zip(history, history[1:]):
            assert newer.parent_id == older.commit_id
        assert len({c.commit_id for c in history}) == len(history)

    @given(
        edits=st.lists(scene_strategy(), min_size=1, max_size=6),
        max_count=st.integers(min_value=1, max_value=10),
    )
    @settings(max_examples=30, deadline=None)
    def test_log_is_bounded(self, edits, max_count) -> None:
        """Test log length is min(max_count, chain length)."""
        engine = make_engine()
        for i, edit in enumerate(edits):
            engine.commit("scene-1", edit, f"edit {i}")

        # The first commit also created the root commit
        assert len(engine.log("scene-1", max_count)) == min(max_count, len(edits) + 1)

    @given(scenes=st.lists(scene_strategy(), min_size=2, max_size=5), data=st.data())
    @settings(max_examples=30, deadline=None)
    def test_revert_restores_content(self, scenes, data) -> None:
        """Test revert to any commit yields that commit's content as the new HEAD."""
        engine = make_engine()
        engine.init("scene-1", "Scene", scenes[0])
        for i, scene in enumerate(scenes[1:]):
            engine.commit("scene-1", scene, f"edit {i}")
        history = engine.log("scene-1", max_count=len(scenes))
        target = data.draw(st.sampled_from(history))

        reverted = engine.revert("scene-1", target.commit_id)

        head = engine.log("scene-1", 1)[0]
        assert head.parent_id == history[0].commit_id
        assert reverted == SceneSnapshot.decode(target.snapshot)
        assert SceneSnapshot.decode(head.snapshot) == reverted
        assert engine.status("scene-1", reverted).has_changes is False
