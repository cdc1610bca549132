#!/usr/bin/env python3
# =============================================================================
# scripts/start_server.py - API Server Entry Point
# =============================================================================
# Starts the MindPath API under uvicorn on HOST:PORT from the environment.
#
# Usage:
#   python scripts/start_server.py
#
#   # Or use uvicorn directly (it doesn't read PORT itself)
#   uvicorn app.main:app --port $PORT
#
# uvicorn logs "Uvicorn running on ..." once the port is bound.
# Runs until the process is terminated.
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn

from app.config import settings


def main():
    """Start the API server."""
    # Importing app.main configures logging
    from app.main import app

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
