"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths and magic numbers (dwell duration,
   tile size, ...) scattered throughout the tile code.
2. Environment: The default project folder can be redirected with the
   COMPANION_PROJECT_PATH environment variable.

Exports:
    DEFAULT_PROJECT_PATH (str): Default folder offered by the project dialogs.
    ENTER_DWELL_MS (int): How long a drag has to hover a nested tile before
        its contents are entered.
"""
import os
from pathlib import Path


# Global Constants
DEFAULT_PROJECT_PATH: str = os.environ.get(
    "COMPANION_PROJECT_PATH", os.path.join(str(Path.home()), "Companion")
)
PROJECT_FILE_FILTER: str = "JSON (*.json)"

# Tiles
DEFAULT_TILE_SIZE: float = 100.0
TILE_PAINT_MARGIN: float = 10.0
DEFAULT_SUB_SCENE_RECT: tuple[float, float, float, float] = (0.0, 0.0, 100.0, 100.0)

# Drag-enter dwell on nested tiles
ENTER_DWELL_MS: int = 1000
DWELL_TICK_MS: int = 16
DWELL_PROGRESS_START: float = 0.1
DWELL_PROGRESS_END: float = 100.0

# Sound file catalog
SOUND_FILE_EXTENSIONS: tuple[str, ...] = (".wav", ".mp3", ".ogg", ".flac", ".aiff", ".m4a")

# Logging
LOG_LEVEL_ENV: str = "COMPANION_LOG_LEVEL"
LOG_FILE_ENV: str = "COMPANION_LOG_FILE"
