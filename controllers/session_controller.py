"""Session lifecycle helpers for the play screen."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.config_store import GameConfigStore
from services.elevenlabs.conversation_client import ElevenLabsConversation
from services.errors import SessionClosedError
from services.session.connection_manager import Publish
from services.session.play_session import PlaySession
from services.session.session_store import SessionStore


async def open_play_session(state: Any, publish: Publish) -> PlaySession:
	"""Create, register and connect a play session from the stored configuration.

	Raises:
		ConfigMissingError: If no configuration has been stored.
	"""
	config_store: GameConfigStore = state.config_store
	config = await config_store.require()
	settings = state.settings
	session = PlaySession(
		config,
		token_issuer=state.signed_urls.get_signed_url,
		transport_factory=state.conversation_factory,
		generate_image=state.scene_illustrator.generate,
		publish=publish,
		debounce_seconds=settings.illustration_debounce_seconds,
		min_narration_length=settings.illustration_min_chars,
	)
	store: SessionStore = state.session_store
	store.add(session)
	await session.start()
	return session


async def close_play_session(state: Any, session: PlaySession) -> None:
	"""Tear a session down and forget it."""
	store: SessionStore = state.session_store
	try:
		await session.aclose()
	finally:
		store.remove(session.session_id)


def default_conversation_factory(handler) -> ElevenLabsConversation:
	return ElevenLabsConversation(handler)


def _get_session(request: Request, session_id: str) -> PlaySession:
	store: SessionStore = request.app.state.session_store
	try:
		return store.get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc).strip("'\"")) from exc


async def session_snapshot(request: Request, session_id: str) -> Dict[str, Any]:
	return _get_session(request, session_id).snapshot()


async def set_session_muted(request: Request, session_id: str, muted: bool) -> Dict[str, Any]:
	session = _get_session(request, session_id)
	await session.connection.set_muted(muted)
	return session.connection.snapshot()


async def reconnect_session(request: Request, session_id: str) -> Dict[str, Any]:
	session = _get_session(request, session_id)
	try:
		await session.reconnect()
	except SessionClosedError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	return session.connection.snapshot()


async def end_session(request: Request, session_id: str) -> Dict[str, Any]:
	session = _get_session(request, session_id)
	await session.aclose()
	return session.connection.snapshot()


async def session_transcript(request: Request, session_id: str, limit: int) -> Dict[str, Any]:
	session = _get_session(request, session_id)
	return {
		"session_id": session.session_id,
		"turns": len(session.transcript),
		"text": session.transcript.as_text(limit=limit),
	}
