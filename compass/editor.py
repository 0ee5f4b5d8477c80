"""
Save path used by the scene editing surface.

A save should never be blocked by version control. When the Compass engine is
missing or fails outright, the scene is written straight to the working
document and no history is recorded.
"""

from dataclasses import dataclass
from typing import Any, Optional

from compass.logging import get_compass_logger
from compass.version_control import CommitResult, CompassEngine, WorkingDocument

logger = get_compass_logger("editor")


@dataclass
class SaveOutcome:
    """
    Result of an editor save.

    Attributes:
        tracked: True if the save went through Compass and produced a commit
        saved: True if the scene reached storage by either path
        result: Compass result whenever the engine handled the save
    """

    tracked: bool
    saved: bool
    result: Optional[CommitResult] = None


class SceneSaver:
    """Saves scenes through Compass, falling back to a direct save."""

    def __init__(
        self, engine: Optional[CompassEngine], fallback: WorkingDocument
    ):
        self.engine = engine
        self.fallback = fallback

    def save(
        self, entity_id: str, snapshot: Any, message: Optional[str] = None
    ) -> SaveOutcome:
        """Commit and save a scene, or write it directly if Compass is unavailable."""
        if self.engine is not None:
            try:
                result = self.engine.save_and_commit(entity_id, snapshot, message)
            except Exception as e:
                logger.error(f"Compass save failed for scene {entity_id}, saving directly: {e}")
            else:
                return SaveOutcome(
                    tracked=result.commit is not None,
                    saved=result.persisted or bool(result.working_saved),
                    result=result,
                )
        else:
            logger.warning("Compass not available, saving scene directly")

        return SaveOutcome(tracked=False, saved=self.fallback.save(snapshot))
