"""Scene illustration generation through fal.ai FLUX."""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import fal_client

from models.session_models import SceneImage
from services.errors import ImageGenerationError
from services.fal.scene_prompts import scene_prompt

LOGGER = logging.getLogger(__name__)

FLUX_MODEL = "fal-ai/flux/dev"

FLUX_ARGUMENTS: Dict[str, Any] = {
	"image_size": "landscape_16_9",
	"num_inference_steps": 28,
	"guidance_scale": 3.5,
	"num_images": 1,
	"enable_safety_checker": True,
}

Subscribe = Callable[..., Awaitable[Dict[str, Any]]]


class SceneIllustrator:
	"""Turn narration text into a single landscape scene image."""

	def __init__(self, fal_key: Optional[str], subscribe: Optional[Subscribe] = None) -> None:
		self.fal_key = fal_key
		if subscribe is None:
			subscribe = fal_client.AsyncClient(key=fal_key).subscribe if fal_key else None
		self._subscribe = subscribe

	@property
	def configured(self) -> bool:
		return self._subscribe is not None

	async def generate(self, narrator_text: str) -> SceneImage:
		"""Return the generated image for the narration.

		Raises:
			ValueError: If the narration is blank.
			ImageGenerationError: If fal.ai is not configured, fails, or returns no URL.
		"""
		if not isinstance(narrator_text, str) or not narrator_text.strip():
			raise ValueError("narratorText is required")
		if self._subscribe is None:
			raise ImageGenerationError("FAL_KEY is not configured")

		prompt = scene_prompt(narrator_text)
		LOGGER.info("Generating image with prompt: %s", prompt)
		start = time.time()
		try:
			result = await self._subscribe(FLUX_MODEL, arguments={"prompt": prompt, **FLUX_ARGUMENTS})
		except Exception as exc:
			raise ImageGenerationError(f"Image request failed: {exc}") from exc

		images = (result or {}).get("images") or []
		url = images[0].get("url") if images and isinstance(images[0], dict) else None
		if not url:
			raise ImageGenerationError("Image response did not include a URL")
		LOGGER.info("Image generated in %.2fs", time.time() - start)
		return SceneImage(url=url, prompt=prompt)
