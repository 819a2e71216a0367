from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException, Request

from services.errors import ImageGenerationError
from services.fal.scene_illustrator import SceneIllustrator


async def generate_scene_image(request: Request, narrator_text: Optional[Any]) -> Dict[str, Any]:
    """Controller for the image proxy: narration in, scene image URL out.

    Args:
        request: FastAPI Request (used to access app.state.scene_illustrator).
        narrator_text: Raw narration sent by the client.

    Returns:
        A dict containing `imageUrl` and the full `prompt` that was used.

    Raises:
        HTTPException(400) if the narration is missing, HTTPException(500) if
        generation fails.
    """
    if not narrator_text or not isinstance(narrator_text, str):
        raise HTTPException(status_code=400, detail="narratorText is required")

    illustrator: SceneIllustrator = request.app.state.scene_illustrator
    try:
        image = await illustrator.generate(narrator_text)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="narratorText is required") from exc
    except ImageGenerationError as exc:
        logging.error("Image generation error: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to generate image") from exc

    return {"imageUrl": image.url, "prompt": image.prompt}
