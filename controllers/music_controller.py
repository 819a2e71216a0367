"""Controller for theme music generation."""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from services.elevenlabs.music_service import MusicService
from services.errors import MusicGenerationError


async def generate_music(request: Request, prompt: Optional[Any]) -> Dict[str, Any]:
    """Validate the prompt and return the generated track as base64 MP3."""
    service: MusicService = request.app.state.music_service
    try:
        return await service.generate(prompt)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except MusicGenerationError as exc:
        raise HTTPException(status_code=exc.status_code or 500, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logging.error("Unexpected music generation error: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to generate music. Please try again.") from exc
