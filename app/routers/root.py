# =============================================================================
# app/routers/root.py - Welcome Endpoint
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()


class WelcomeResponse(BaseModel):
    """Fixed status payload for the API root."""
    status: str
    message: str


WELCOME = WelcomeResponse(status="ok", message="Welcome to the MindPath API")


@router.api_route("/", methods=["GET", "HEAD"], response_model=WelcomeResponse)
async def root():
    """
    Root endpoint.

    Always answers 200 with the same payload (HEAD included). Doesn't touch
    the database.
    """
    return WELCOME
