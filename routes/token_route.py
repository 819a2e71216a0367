from typing import Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Request

from controllers.token_controller import issue_signed_url

router = APIRouter(prefix="/api")


@router.get("/elevenlabs-token")
async def get_token(request: Request):
    """Return a short-lived signed URL for the conversational agent."""
    try:
        return await issue_signed_url(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.post("/elevenlabs-token")
async def post_token(request: Request, variables: Optional[Dict[str, str]] = Body(default=None)):
    """Same as GET; a JSON map of variables is accepted for older clients."""
    try:
        return await issue_signed_url(request, variables)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail="Internal server error") from exc
