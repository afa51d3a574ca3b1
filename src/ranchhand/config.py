"""Runtime configuration for ranchhand.

Settings are module constants; the few that vary per deployment can be
overridden through environment variables.
"""

import logging
import os
from pathlib import Path

# Centralized storage location
# Can be overridden via RANCHHAND_DATA_DIR environment variable
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("RANCHHAND_DATA_DIR", _default_data_dir))

LOG_LEVEL = os.environ.get("RANCHHAND_LOG_LEVEL", "INFO")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "RANCHHAND_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# Reference map image (pixels)
MAP_IMAGE_WIDTH = 4505
MAP_IMAGE_HEIGHT = 3340

# Viewport limits
MAX_ZOOM = 6.0
ZOOM_STEP = 0.5
ZOOM_WHEEL_STEP = 0.15
DRAG_THRESHOLD = 4  # px on either axis

# Ranch fund compare-and-swap attempts before giving up
FUND_CAS_RETRIES = 5

ACTIVITY_FEED_DEFAULT_LIMIT = 20


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging for CLI and server entry points."""
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
