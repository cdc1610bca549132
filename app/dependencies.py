# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from lib.mongo_client import MongoDatabase


def get_database(request: Request) -> MongoDatabase:
    """
    Get the application's database connection.

    Returns the instance owned by the running app, which may not be
    connected yet (or at all).
    """
    return request.app.state.database


def get_app_settings(request: Request) -> Settings:
    """Get the settings the running app was built with."""
    return request.app.state.settings


# Type aliases for dependency injection
DatabaseDep = Annotated[MongoDatabase, Depends(get_database)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
