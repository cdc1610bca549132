# =============================================================================
# lib/bootstrap.py - Filesystem Bootstrap
# =============================================================================
# Startup steps that prepare the local filesystem.
#
# Failures are logged and reported through the return value. They never stop
# the process from serving requests.
# =============================================================================

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> bool:
    """
    Create a directory if it doesn't exist yet.

    An existing path is left untouched, with no log output.

    Args:
        path: Directory to create (parents are created too)

    Returns:
        True if the directory was created by this call, False otherwise
        (already present, or creation failed)
    """
    path = Path(path)
    if path.exists():
        return False

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating uploads directory: {e}")
        return False

    logger.info(f"Uploads directory created: {path}")
    return True
