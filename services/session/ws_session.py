"""Dispatch play-screen websocket frames to the session."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import WebSocket

from services.session.play_session import PlaySession


class PlaySocketHandler:
	"""Route inbound browser frames for a single play session."""

	def __init__(self, session: PlaySession) -> None:
		self.session = session

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		connection = self.session.connection
		try:
			if message_type == "audio.chunk":
				await connection.send_user_audio(payload.get("audio_b64") or "")
				return
			if message_type == "session.mute":
				await connection.set_muted(bool(payload.get("muted")))
				result = None
			elif message_type == "session.reconnect":
				await self.session.reconnect()
				result = None
			elif message_type == "session.end":
				await self.session.aclose()
				result = None
			elif message_type == "session.snapshot":
				result = {"type": "session.snapshot", **self.session.snapshot()}
			else:
				raise ValueError("Unsupported message type.")
			if result is not None:
				result["request_id"] = request_id
				await self._send(websocket, result)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			await self._send_error(websocket, request_id, str(exc))

	async def _send_error(self, websocket: WebSocket, request_id: Optional[Any], detail: str) -> None:
		await self._send(websocket, {"type": "error", "request_id": request_id, "detail": detail})

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		await websocket.send_text(json.dumps(payload))
