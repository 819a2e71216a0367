"""Instrumental theme music generation via the ElevenLabs music API."""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Dict, Optional

import httpx

from services.errors import MusicGenerationError

LOGGER = logging.getLogger(__name__)

MUSIC_PATH = "/v1/music"
MUSIC_MODEL = "music_v1"
MUSIC_LENGTH_MS = 30_000


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


class MusicService:
    """Generate 30 second instrumental tracks and return them base64 encoded."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str],
        base_url: str = "https://api.elevenlabs.io",
    ) -> None:
        if http_client is None:
            raise ValueError("httpx.AsyncClient is required.")
        self.http_client = http_client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def generate(self, prompt: Optional[str]) -> Dict[str, Any]:
        """Return `{success, message, audio, audioSize, format}` for a prompt.

        Raises:
            ValueError: If the prompt is missing or blank.
            MusicGenerationError: If the key is missing or the upstream call fails.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("Prompt is required and must be a non-empty string")
        if not self.api_key:
            raise MusicGenerationError(
                "Eleven Labs API key is not configured. Please set ELEVEN_LABS_API_KEY "
                "in your environment variables.",
                status_code=500,
            )

        body = {
            "prompt": prompt.strip(),
            "music_length_ms": MUSIC_LENGTH_MS,
            "model_id": MUSIC_MODEL,
            "force_instrumental": True,
        }
        LOGGER.info("Music request: prompt=%r length=%d", _preview(body["prompt"]), len(body["prompt"]))

        start = time.time()
        try:
            response = await self.http_client.post(
                f"{self.base_url}{MUSIC_PATH}",
                headers={"Content-Type": "application/json", "xi-api-key": self.api_key},
                json=body,
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Music request failed: %s", exc)
            raise MusicGenerationError("Failed to generate music. Please try again.", status_code=500) from exc

        duration = time.time() - start
        if response.status_code < 200 or response.status_code >= 300:
            LOGGER.error("Eleven Labs music error %s: %s", response.status_code, response.text)
            raise MusicGenerationError(
                f"Eleven Labs API error: {response.reason_phrase}",
                status_code=response.status_code,
            )

        audio = response.content
        LOGGER.info("Music received: %d bytes in %.2fs", len(audio), duration)
        return {
            "success": True,
            "message": "Music generated successfully",
            "audio": base64.b64encode(audio).decode("ascii"),
            "audioSize": len(audio),
            "format": "mp3",
        }
