"""Issue short-lived signed URLs for the ElevenLabs conversational agent."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from services.errors import TokenFetchError

LOGGER = logging.getLogger(__name__)

SIGNED_URL_PATH = "/v1/convai/conversation/get_signed_url"


class SignedUrlService:
    """Exchange the server-held API key for a pre-authorized WebSocket URL."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str],
        agent_id: str,
        base_url: str = "https://api.elevenlabs.io",
    ) -> None:
        if http_client is None:
            raise ValueError("httpx.AsyncClient is required.")
        self.http_client = http_client
        self.api_key = api_key
        self.agent_id = agent_id
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def get_signed_url(self) -> str:
        """Return a signed conversation URL.

        Raises:
            TokenFetchError: If the key is missing, the upstream call fails or
                the response carries no `signed_url`. `status_code` holds the
                HTTP status the proxy should answer with.
        """
        if not self.api_key:
            LOGGER.error("ELEVEN_LABS_API_KEY not configured")
            raise TokenFetchError("ELEVEN_LABS_API_KEY not configured", status_code=500)

        url = f"{self.base_url}{SIGNED_URL_PATH}"
        LOGGER.info("Requesting signed URL for agent %s", self.agent_id)
        try:
            response = await self.http_client.get(
                url,
                params={"agent_id": self.agent_id},
                headers={"xi-api-key": self.api_key},
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Signed URL request failed: %s", exc)
            raise TokenFetchError("Failed to get signed URL", status_code=502) from exc

        if response.status_code != 200:
            LOGGER.error("ElevenLabs API error %s: %s", response.status_code, response.text)
            raise TokenFetchError("Failed to get signed URL", status_code=response.status_code)

        try:
            signed_url = response.json().get("signed_url")
        except ValueError as exc:
            raise TokenFetchError("Failed to get signed URL", status_code=502) from exc
        if not signed_url:
            raise TokenFetchError("Failed to get signed URL", status_code=502)

        LOGGER.info("Received signed URL (truncated): %s...", signed_url[:100])
        return signed_url
