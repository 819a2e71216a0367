"""Controller for issuing conversational agent signed URLs."""

import logging
from typing import Dict, Optional

from fastapi import HTTPException, Request

from services.elevenlabs.signed_url import SignedUrlService
from services.errors import TokenFetchError


async def issue_signed_url(request: Request, variables: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Return `{signedUrl}` for the configured agent.

    Args:
        request: FastAPI Request (used to access app.state.signed_urls).
        variables: Optional dynamic variables sent by older clients. They are
            only logged; variables travel with the conversation start instead.

    Raises:
        HTTPException: With the upstream status when the URL cannot be issued.
    """
    if variables:
        logging.info("Token POST received %d variables; they belong to the session start", len(variables))

    service: SignedUrlService = request.app.state.signed_urls
    try:
        signed_url = await service.get_signed_url()
    except TokenFetchError as exc:
        raise HTTPException(status_code=exc.status_code or 500, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logging.error("Error getting ElevenLabs token: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error") from exc
    return {"signedUrl": signed_url}
