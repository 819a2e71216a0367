"""FastAPI routes controlling open play sessions."""

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from controllers.session_controller import (
	end_session,
	reconnect_session,
	session_snapshot,
	session_transcript,
	set_session_muted,
)

router = APIRouter(prefix="/sessions")


class MutePayload(BaseModel):
	muted: bool = True


@router.get("")
async def list_sessions_route(request: Request):
	return {"sessions": request.app.state.session_store.ids()}


@router.get("/{session_id}")
async def session_snapshot_route(request: Request, session_id: str):
	try:
		return await session_snapshot(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/transcript")
async def session_transcript_route(request: Request, session_id: str, limit: int = Query(default=15, ge=0)):
	"""Recent turns as `NARRATOR: ...` / `PARTY: ...` lines; `limit=0` returns all of them."""
	try:
		return await session_transcript(request, session_id, limit)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/mute")
async def mute_route(request: Request, session_id: str, payload: MutePayload):
	try:
		return await set_session_muted(request, session_id, payload.muted)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/reconnect")
async def reconnect_route(request: Request, session_id: str):
	try:
		return await reconnect_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/end")
async def end_route(request: Request, session_id: str):
	try:
		return await end_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
