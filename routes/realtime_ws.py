"""WebSocket endpoint for the live play screen."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from controllers.session_controller import close_play_session, open_play_session
from services.errors import ConfigMissingError
from services.session.ws_session import PlaySocketHandler

router = APIRouter()

LOGGER = logging.getLogger(__name__)


@router.websocket("/ws/play")
async def play_socket(websocket: WebSocket):
	"""Run one play session for as long as the browser keeps this socket open."""
	await websocket.accept()

	async def publish(event: Dict[str, Any]) -> None:
		if websocket.client_state != WebSocketState.CONNECTED:
			return
		try:
			await websocket.send_text(json.dumps(event))
		except (WebSocketDisconnect, RuntimeError) as exc:
			LOGGER.debug("Dropping %s event for closed socket: %s", event.get("type"), exc)

	try:
		session = await open_play_session(websocket.app.state, publish)
	except ConfigMissingError as exc:
		await websocket.send_text(json.dumps({"type": "error", "code": "config_missing", "detail": str(exc)}))
		await websocket.close()
		return

	await publish({"type": "session.snapshot", **session.snapshot()})
	handler = PlaySocketHandler(session)
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			except Exception:
				if websocket.client_state != WebSocketState.CONNECTED:
					break
				await publish({"type": "error", "detail": "Invalid websocket frame"})
				continue
			try:
				payload = json.loads(raw)
			except Exception:
				await publish({"type": "error", "detail": "Payload must be JSON"})
				continue
			if not isinstance(payload, dict):
				await publish({"type": "error", "detail": "Payload must be a JSON object"})
				continue
			await handler.handle(websocket, payload)
	finally:
		await close_play_session(websocket.app.state, session)
	try:
		await websocket.close()
	except Exception:
		pass
