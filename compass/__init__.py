"""
Compass - in-application version control for game scenes.

Snapshots a mutable scene document over time so an editor can commit changes,
inspect history, diff two points in time and revert without losing history.
"""

__version__ = "0.1.0"

# Configuration is available at top level for convenience
from compass.config import config

__all__ = ["config", "__version__"]
