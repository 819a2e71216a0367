"""Streaming client for the ElevenLabs Conversational AI WebSocket."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

import websockets
from websockets.exceptions import ConnectionClosedError, WebSocketException

from services.errors import ConnectionFailedError

LOGGER = logging.getLogger(__name__)


class ConversationHandler(Protocol):
	"""Receiver of inbound conversation events."""

	async def on_connect(self, conversation_id: Optional[str]) -> None: ...

	async def on_disconnect(self, reason: str) -> None: ...

	async def on_error(self, message: str) -> None: ...

	async def on_message(self, role: str, message: str) -> None: ...

	async def on_audio(self, audio_b64: str) -> None: ...


Connector = Callable[[str], Awaitable[Any]]


class ElevenLabsConversation:
	"""One streaming conversation with the voice agent.

	`start` opens the socket and sends the dynamic variables; a background
	reader task then dispatches server frames to the handler until the socket
	closes or `end` is called.
	"""

	def __init__(self, handler: ConversationHandler, connect: Optional[Connector] = None) -> None:
		self.handler = handler
		self._connect = connect or websockets.connect
		self._ws = None
		self._reader: Optional[asyncio.Task] = None
		self.muted = False
		self.conversation_id: Optional[str] = None

	@property
	def open(self) -> bool:
		return self._ws is not None

	async def start(self, signed_url: str, dynamic_variables: Optional[Dict[str, str]] = None) -> None:
		"""Open the conversation on a signed URL.

		Raises:
			ConnectionFailedError: If the socket cannot be opened or the
				initiation frame cannot be sent.
		"""
		if self._ws is not None:
			raise RuntimeError("Conversation already started.")
		try:
			ws = await self._connect(signed_url)
		except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
			raise ConnectionFailedError(f"Failed to connect: {exc}") from exc

		initiation: Dict[str, Any] = {"type": "conversation_initiation_client_data"}
		if dynamic_variables:
			initiation["dynamic_variables"] = dict(dynamic_variables)
		try:
			await ws.send(json.dumps(initiation))
		except WebSocketException as exc:
			await ws.close()
			raise ConnectionFailedError(f"Failed to start conversation: {exc}") from exc

		self._ws = ws
		self._reader = asyncio.create_task(self._read_loop(ws))

	async def set_muted(self, muted: bool) -> None:
		"""Stop or resume forwarding microphone audio; playback is untouched."""
		self.muted = bool(muted)

	async def send_user_audio(self, audio_b64: str) -> bool:
		"""Forward a base64 microphone chunk. Returns False when it was not sent."""
		if self.muted or self._ws is None or not audio_b64:
			return False
		await self._ws.send(json.dumps({"user_audio_chunk": audio_b64}))
		return True

	async def end(self) -> None:
		"""Close the conversation. Safe to call more than once."""
		reader, self._reader = self._reader, None
		ws, self._ws = self._ws, None
		if reader is not None and reader is not asyncio.current_task():
			reader.cancel()
			try:
				await reader
			except asyncio.CancelledError:
				pass
		if ws is not None:
			try:
				await ws.close()
			except WebSocketException as exc:
				LOGGER.debug("Error while closing conversation socket: %s", exc)

	async def _read_loop(self, ws) -> None:
		try:
			async for raw in ws:
				await self._dispatch(ws, raw)
		except ConnectionClosedError as exc:
			self._ws = None
			await self.handler.on_error(f"Connection lost: {exc}")
			return
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.error("Conversation reader failed: %s", exc)
			self._ws = None
			try:
				await ws.close()
			except WebSocketException as close_exc:
				LOGGER.debug("Error while closing conversation socket: %s", close_exc)
			await self.handler.on_error(f"Conversation failed: {exc}")
			return
		self._ws = None
		await self.handler.on_disconnect("closed")

	async def _dispatch(self, ws, raw: Any) -> None:
		if isinstance(raw, bytes):
			LOGGER.debug("Ignoring binary conversation frame (%d bytes)", len(raw))
			return
		try:
			event = json.loads(raw)
		except json.JSONDecodeError:
			LOGGER.warning("Ignoring non-JSON conversation frame")
			return

		event_type = event.get("type")
		if event_type == "conversation_initiation_metadata":
			metadata = event.get("conversation_initiation_metadata_event") or {}
			self.conversation_id = metadata.get("conversation_id")
			await self.handler.on_connect(self.conversation_id)
		elif event_type == "ping":
			ping = event.get("ping_event") or {}
			await ws.send(json.dumps({"type": "pong", "event_id": ping.get("event_id")}))
		elif event_type == "agent_response":
			text = (event.get("agent_response_event") or {}).get("agent_response") or ""
			await self.handler.on_message("agent", text)
		elif event_type == "user_transcript":
			text = (event.get("user_transcription_event") or {}).get("user_transcript") or ""
			await self.handler.on_message("user", text)
		elif event_type == "audio":
			audio_b64 = (event.get("audio_event") or {}).get("audio_base_64")
			if audio_b64:
				await self.handler.on_audio(audio_b64)
		elif event_type == "interruption":
			LOGGER.debug("Agent interrupted: %s", event.get("interruption_event"))
		else:
			LOGGER.debug("Unhandled conversation event type: %s", event_type)
