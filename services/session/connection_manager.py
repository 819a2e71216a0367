"""Lifecycle of the streaming conversation for one play session."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from models.game_config import GameConfiguration
from models.session_models import ConnectionState, Speaker, Utterance
from services.errors import ConfigMissingError, ConnectionFailedError, SessionClosedError, TokenFetchError
from services.session.debounced_trigger import DebouncedTrigger
from services.session.dynamic_variables import build_dynamic_variables
from services.session.transcript_store import TranscriptStore

LOGGER = logging.getLogger(__name__)

Publish = Callable[[Dict[str, Any]], Awaitable[None]]

ALLOWED_TRANSITIONS = {
	ConnectionState.DISCONNECTED: {ConnectionState.CONNECTING},
	ConnectionState.CONNECTING: {ConnectionState.CONNECTED, ConnectionState.ERROR, ConnectionState.DISCONNECTED},
	ConnectionState.CONNECTED: {ConnectionState.DISCONNECTED, ConnectionState.ERROR},
	ConnectionState.ERROR: {ConnectionState.CONNECTING, ConnectionState.DISCONNECTED},
}


async def _discard(_event: Dict[str, Any]) -> None:
	return None


class SessionConnectionManager:
	"""Own the conversation connection and fan its events out.

	Messages go to the transcript, narrator turns also go to the debounced
	illustration trigger. Token and connection failures park the manager in
	the `error` state until `reconnect` is called.
	"""

	def __init__(
		self,
		config: Optional[GameConfiguration],
		token_issuer: Callable[[], Awaitable[str]],
		transport_factory: Callable[[Any], Any],
		transcript: TranscriptStore,
		trigger: DebouncedTrigger,
		publish: Optional[Publish] = None,
	) -> None:
		self.config = config
		self.token_issuer = token_issuer
		self.transport_factory = transport_factory
		self.transcript = transcript
		self.trigger = trigger
		self.publish = publish or _discard
		self.state = ConnectionState.DISCONNECTED
		self.error_message: Optional[str] = None
		self.muted = False
		self.variables: Optional[Dict[str, str]] = None
		self.transport = None
		self.ended = False
		self._attempt = 0

	@property
	def retryable(self) -> bool:
		return self.state is ConnectionState.ERROR

	def snapshot(self) -> Dict[str, Any]:
		return {
			"state": self.state.value,
			"error": self.error_message,
			"muted": self.muted,
			"retryable": self.retryable,
		}

	async def connect(self) -> ConnectionState:
		"""Fetch a signed URL and open the conversation with the session variables.

		Raises:
			ConfigMissingError: If no game configuration was provided.
			SessionClosedError: If `end` has already been called.
		"""
		if self.config is None:
			raise ConfigMissingError("No game configuration found. Configure your adventure first.")
		self._ensure_open()
		if self.state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
			LOGGER.warning("connect() called while %s; ignoring", self.state.value)
			return self.state
		if self.variables is None:
			self.variables = build_dynamic_variables(self.config)

		self.error_message = None
		self._attempt += 1
		attempt = self._attempt
		await self._transition(ConnectionState.CONNECTING)
		try:
			signed_url = await self.token_issuer()
			if not self._is_current(attempt):
				LOGGER.info("Connect attempt %d superseded before the agent was opened", attempt)
				return self.state
			transport = self.transport_factory(self)
			await transport.set_muted(self.muted)
			self.transport = transport
			await transport.start(signed_url, self.variables)
		except (TokenFetchError, ConnectionFailedError) as exc:
			if not self._is_current(attempt):
				LOGGER.info("Connect attempt %d failed after being superseded: %s", attempt, exc)
				return self.state
			LOGGER.error("Failed to connect to agent: %s", exc)
			self.transport = None
			await self._fail(str(exc) or "Failed to connect")
			return self.state
		if not self._is_current(attempt):
			# end() or reconnect() ran while the agent was starting
			LOGGER.info("Closing agent opened by superseded connect attempt %d", attempt)
			if self.transport is transport:
				self.transport = None
			await transport.end()
		return self.state

	async def reconnect(self) -> ConnectionState:
		"""Retry with a fresh signed URL and the same variables.

		Raises:
			SessionClosedError: If `end` has already been called.
		"""
		self._ensure_open()
		await self._close_transport()
		if self.state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
			await self._transition(ConnectionState.DISCONNECTED)
		return await self.connect()

	async def set_muted(self, muted: bool) -> None:
		"""Toggle microphone forwarding without touching the connection."""
		self.muted = bool(muted)
		if self.transport is not None:
			await self.transport.set_muted(self.muted)
		await self.publish({"type": "session.muted", "muted": self.muted})

	async def send_user_audio(self, audio_b64: str) -> bool:
		if self.muted or self.transport is None or self.state is not ConnectionState.CONNECTED:
			return False
		return await self.transport.send_user_audio(audio_b64)

	async def end(self) -> None:
		"""Close the conversation and stop pending illustration work. Final."""
		self.ended = True
		self._attempt += 1
		self.trigger.cancel()
		await self._close_transport()
		await self._transition(ConnectionState.DISCONNECTED)

	async def on_connect(self, conversation_id: Optional[str] = None) -> None:
		LOGGER.info("Agent connected (conversation %s)", conversation_id)
		self.error_message = None
		await self._transition(ConnectionState.CONNECTED)

	async def on_disconnect(self, reason: str = "") -> None:
		LOGGER.info("Agent disconnected: %s", reason)
		if self.state is ConnectionState.ERROR:
			return
		await self._transition(ConnectionState.DISCONNECTED)

	async def on_error(self, message: str) -> None:
		LOGGER.error("Conversation error: %s", message)
		await self._fail(message or "Connection error occurred")

	async def on_message(self, role: str, message: str) -> Optional[Utterance]:
		"""Record an inbound turn and offer narrator turns for illustration."""
		if not message or not message.strip():
			return None
		try:
			speaker = Speaker.from_role(role)
		except ValueError:
			LOGGER.warning("Ignoring message with unknown role %r", role)
			return None
		utterance = self.transcript.append(Utterance(speaker=speaker, text=message))
		if speaker is Speaker.NARRATOR:
			self.trigger.offer(message)
		await self.publish({"type": "transcript.append", "utterance": utterance.to_dict()})
		return utterance

	async def on_audio(self, audio_b64: str) -> None:
		await self.publish({"type": "agent.audio", "audio_b64": audio_b64})

	def _ensure_open(self) -> None:
		if self.ended:
			raise SessionClosedError("Session is closed; start a new session.")

	def _is_current(self, attempt: int) -> bool:
		return not self.ended and attempt == self._attempt

	async def _fail(self, message: str) -> None:
		self.error_message = message
		await self._transition(ConnectionState.ERROR)

	async def _close_transport(self) -> None:
		transport, self.transport = self.transport, None
		if transport is not None:
			await transport.end()

	async def _transition(self, new_state: ConnectionState) -> None:
		if new_state is self.state:
			return
		if new_state not in ALLOWED_TRANSITIONS[self.state]:
			LOGGER.warning("Ignoring connection transition %s -> %s", self.state.value, new_state.value)
			return
		LOGGER.info("Connection %s -> %s", self.state.value, new_state.value)
		self.state = new_state
		await self.publish({"type": "connection.state", **self.snapshot()})
