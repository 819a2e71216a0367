from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from controllers.image_controller import generate_scene_image

router = APIRouter(prefix="/api")


class GenerateImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    narrator_text: Optional[Any] = Field(default=None, alias="narratorText")


@router.post("/generate-image")
async def post_generate_image(request: Request, payload: GenerateImageRequest):
    """Generate a scene illustration from narrator text."""
    try:
        return await generate_scene_image(request, payload.narrator_text)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Failed to generate image") from exc
