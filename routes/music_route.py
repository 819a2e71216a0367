from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.music_controller import generate_music

router = APIRouter(prefix="/api/music")


class MusicRequest(BaseModel):
    prompt: Optional[Any] = None


@router.post("/generate")
async def post_generate_music(request: Request, payload: MusicRequest):
    """Generate a 30 second instrumental track for the campaign theme."""
    try:
        return await generate_music(request, payload.prompt)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Failed to generate music. Please try again.") from exc
